import os

import pytest

from cineverse.actions import can_user_download_subtitle, create_subtitle, delete_subtitle
from cineverse.errors import InvalidArgument, NotAuthenticated, NotAuthorized, NotFound
from cineverse.models import Subtitle


@pytest.fixture
def post(user, make_post):
    return make_post(user)


def test_create_records_uploader_name(db, user, post):
    subtitle = create_subtitle(db, user, post.id, "en", "/uploads/subtitles/a.srt")

    assert subtitle.uploader_name == user.name
    assert subtitle.language == "en"


def test_create_needs_user_name(db, make_user, post):
    nameless = make_user(name="")
    with pytest.raises(NotAuthenticated):
        create_subtitle(db, nameless, post.id, "en", "/uploads/subtitles/a.srt")


def test_create_validates_input(db, user, post):
    with pytest.raises(InvalidArgument):
        create_subtitle(db, user, post.id, "", "/uploads/subtitles/a.srt")
    with pytest.raises(NotFound):
        create_subtitle(db, user, 999, "en", "/uploads/subtitles/a.srt")


def test_uploader_deletes_and_file_is_removed(db, user, post, upload_dir):
    os.makedirs(os.path.join(upload_dir, "subtitles"), exist_ok=True)
    path = os.path.join(upload_dir, "subtitles", "b.srt")
    with open(path, "w") as f:
        f.write("1\n00:00:01,000 --> 00:00:02,000\nHello\n")
    subtitle = create_subtitle(db, user, post.id, "en", "/uploads/subtitles/b.srt")

    delete_subtitle(db, user, subtitle.id)

    assert db.query(Subtitle).count() == 0
    assert not os.path.exists(path)


def test_others_cannot_delete(db, user, make_user, super_admin, post):
    subtitle = create_subtitle(db, user, post.id, "de", "https://cdn.example.com/de.srt")

    with pytest.raises(NotAuthorized):
        delete_subtitle(db, make_user(), subtitle.id)

    delete_subtitle(db, super_admin, subtitle.id)
    assert db.query(Subtitle).count() == 0


def test_delete_missing_subtitle(db, user):
    with pytest.raises(NotFound):
        delete_subtitle(db, user, 7)


def test_download_needs_sign_in(user):
    assert can_user_download_subtitle(user) is True
    assert can_user_download_subtitle(None) is False
