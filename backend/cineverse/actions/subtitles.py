import logging

from sqlalchemy.orm import Session

from cineverse.cache import revalidate_path
from cineverse.errors import InvalidArgument, NotAuthenticated, NotFound
from cineverse.models import Post, Subtitle
from cineverse.permissions import SUBTITLE_DELETE, require
from cineverse.storage import delete_uploaded_file

logger = logging.getLogger("cineverse.subtitles")


def create_subtitle(db: Session, user, post_id: int, language: str, url: str) -> Subtitle:
    """Register an already stored subtitle file for a post."""
    if user is None or not user.name:
        raise NotAuthenticated("Not authenticated or user name is missing")
    if not language or not url:
        raise InvalidArgument("Missing required fields.")

    if not db.get(Post, post_id):
        raise NotFound.resource("Post")

    subtitle = Subtitle(post_id=post_id, language=language, uploader_name=user.name, url=url)
    db.add(subtitle)
    db.commit()
    db.refresh(subtitle)

    logger.info("User %s added %s subtitle %s to post %s", user.id, language, subtitle.id, post_id)
    revalidate_path(f"/movies/{post_id}")
    return subtitle


def delete_subtitle(db: Session, user, subtitle_id: int) -> None:
    if user is None:
        raise NotAuthenticated()

    subtitle = db.get(Subtitle, subtitle_id)
    if not subtitle:
        raise NotFound.resource("Subtitle")

    require(user, SUBTITLE_DELETE, subtitle, "You are not authorized to delete this subtitle.")

    post_id, url = subtitle.post_id, subtitle.url
    db.delete(subtitle)
    db.commit()
    delete_uploaded_file(url)

    logger.info("User %s deleted subtitle %s", user.id, subtitle_id)
    revalidate_path(f"/movies/{post_id}")


def can_user_download_subtitle(user) -> bool:
    return user is not None
