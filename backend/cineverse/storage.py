import base64
import binascii
import logging
import os
import uuid

from cineverse.config import settings

logger = logging.getLogger("cineverse.storage")

ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}


def _disk_path(url_path: str) -> str:
    """Map /uploads/<subfolder>/<name> to its location under UPLOAD_DIR"""
    relative = url_path[len("/uploads/"):]
    return os.path.join(settings.UPLOAD_DIR, *relative.split("/"))


def save_image_from_data_url(data_url: str | None, subfolder: str) -> str | None:
    """Save a ``data:image/...;base64,`` URL and return its /uploads path.

    Anything that is not a data URL is returned unchanged (already stored).
    A malformed data URL returns None.
    """
    if not data_url:
        return data_url
    if not data_url.startswith("data:image"):
        return data_url

    try:
        header, encoded = data_url.split(",", 1)
        ext = header[len("data:image/"):].split(";", 1)[0].lower()
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            logger.warning("Rejected image type %r", ext)
            return None
        content = base64.b64decode(encoded, validate=True)
    except (ValueError, binascii.Error) as e:
        logger.error("Error decoding image data URL: %s", e)
        return None

    upload_dir = os.path.join(settings.UPLOAD_DIR, subfolder)
    os.makedirs(upload_dir, exist_ok=True)

    filename = f"{uuid.uuid4()}.{ext}"
    filepath = os.path.join(upload_dir, filename)

    with open(filepath, "wb") as f:
        f.write(content)

    logger.info("Saved image %s (%d bytes)", filepath, len(content))
    return f"/uploads/{subfolder}/{filename}"


def delete_uploaded_file(url_path: str | None) -> None:
    """Best-effort removal of a stored upload. Never raises."""
    if not url_path or not url_path.startswith("/uploads/"):
        return
    if ".." in url_path.split("/"):
        logger.warning("Refusing to delete %s", url_path)
        return
    path = _disk_path(url_path)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error("Failed to delete file %s: %s", url_path, e)
