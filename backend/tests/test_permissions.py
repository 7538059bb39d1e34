import pytest

from cineverse.errors import InvalidArgument, NotAuthenticated, NotAuthorized
from cineverse.lifecycle import check_transition, parse_status
from cineverse.models import PostStatus, Role
from cineverse.permissions import (
    POST_ADMIN_LIST, POST_CHANGE_STATUS, POST_CREATE, POST_DELETE, POST_HARD_DELETE,
    POST_UPDATE, REVIEW_DELETE, SUBTITLE_DELETE, can, require,
)


class Actor:
    def __init__(self, id, role=Role.USER, name="Ann"):
        self.id = id
        self.role = role.value
        self.name = name


class Resource:
    def __init__(self, **attrs):
        self.__dict__.update(attrs)


def test_anonymous_can_do_nothing():
    for action in (POST_CREATE, POST_UPDATE, POST_DELETE, REVIEW_DELETE):
        assert can(None, action) is False


def test_role_grants():
    user = Actor(1)
    admin = Actor(2, Role.USER_ADMIN)
    root = Actor(3, Role.SUPER_ADMIN)

    assert can(user, POST_CREATE)
    assert not can(user, POST_ADMIN_LIST)
    assert can(admin, POST_ADMIN_LIST)
    assert not can(admin, POST_HARD_DELETE, Resource(author_id=2))
    assert can(root, POST_HARD_DELETE, Resource(author_id=1))


def test_user_admin_ownership():
    admin = Actor(2, Role.USER_ADMIN)

    assert can(admin, POST_DELETE, Resource(author_id=2))
    assert not can(admin, POST_DELETE, Resource(author_id=9))
    assert can(admin, POST_CHANGE_STATUS, Resource(author_id=2))
    assert not can(admin, POST_CHANGE_STATUS, Resource(author_id=9))


def test_update_is_author_or_super_admin():
    post = Resource(author_id=1)

    assert can(Actor(1), POST_UPDATE, post)
    assert not can(Actor(2, Role.USER_ADMIN), POST_UPDATE, post)
    assert can(Actor(3, Role.SUPER_ADMIN), POST_UPDATE, post)


def test_review_and_subtitle_ownership():
    review = Resource(user_id=1)
    subtitle = Resource(uploader_name="Ann")

    assert can(Actor(1), REVIEW_DELETE, review)
    assert not can(Actor(2), REVIEW_DELETE, review)
    assert can(Actor(5, name="Ann"), SUBTITLE_DELETE, subtitle)
    assert not can(Actor(6, name="Bob"), SUBTITLE_DELETE, subtitle)
    assert not can(Actor(7, name=""), SUBTITLE_DELETE, Resource(uploader_name=""))


def test_require_raises_by_kind():
    with pytest.raises(NotAuthenticated):
        require(None, POST_CREATE)
    with pytest.raises(NotAuthorized) as exc_info:
        require(Actor(1), POST_ADMIN_LIST, message="Nope")
    assert exc_info.value.message == "Nope"
    assert exc_info.value.status_code == 403


@pytest.mark.parametrize("current", [s.value for s in PostStatus if s != PostStatus.PENDING_DELETION])
def test_transitions_allowed_outside_pending_deletion(current):
    for target in PostStatus:
        check_transition(current, target)


def test_pending_deletion_cannot_be_left():
    with pytest.raises(InvalidArgument):
        check_transition(PostStatus.PENDING_DELETION.value, PostStatus.DRAFT)
    check_transition(PostStatus.PENDING_DELETION.value, PostStatus.PENDING_DELETION)


def test_parse_status():
    assert parse_status("PUBLISHED") is PostStatus.PUBLISHED
    with pytest.raises(InvalidArgument):
        parse_status("published ")
