import base64
import os

from cineverse.storage import delete_uploaded_file, save_image_from_data_url


def _data_url(kind="png", payload=b"image-bytes"):
    return f"data:image/{kind};base64," + base64.b64encode(payload).decode()


def test_saves_data_url(upload_dir):
    url = save_image_from_data_url(_data_url(), "posts")

    assert url.startswith("/uploads/posts/") and url.endswith(".png")
    with open(os.path.join(upload_dir, "posts", url.rsplit("/", 1)[1]), "rb") as f:
        assert f.read() == b"image-bytes"


def test_passes_through_stored_urls():
    assert save_image_from_data_url("/uploads/posts/x.png", "posts") == "/uploads/posts/x.png"
    assert save_image_from_data_url("https://img.example.com/p.jpg", "posts") == "https://img.example.com/p.jpg"
    assert save_image_from_data_url(None, "posts") is None


def test_rejects_bad_data_urls():
    assert save_image_from_data_url(_data_url(kind="svg+xml"), "posts") is None
    assert save_image_from_data_url("data:image/png;base64,not base64!!", "posts") is None
    assert save_image_from_data_url("data:image/png;base64", "posts") is None


def test_delete_uploaded_file(upload_dir):
    url = save_image_from_data_url(_data_url(), "posts")
    path = os.path.join(upload_dir, "posts", url.rsplit("/", 1)[1])

    delete_uploaded_file(url)

    assert not os.path.exists(path)
    # Second call and foreign paths are no-ops
    delete_uploaded_file(url)
    delete_uploaded_file("https://img.example.com/p.jpg")
    delete_uploaded_file(None)


def test_delete_refuses_parent_segments(upload_dir):
    outside = os.path.join(os.path.dirname(upload_dir), "keep-me.txt")
    with open(outside, "w") as f:
        f.write("x")
    try:
        delete_uploaded_file("/uploads/../keep-me.txt")
        assert os.path.exists(outside)
    finally:
        os.remove(outside)
