"""
Role based permissions for posts, reviews and subtitles.

Each action asks ``can(actor, action, resource)`` once, before touching the
database. Ownership rules live here so the actions don't repeat them.
"""
import logging

from cineverse.errors import NotAuthenticated, NotAuthorized
from cineverse.models.user import Role

logger = logging.getLogger("cineverse.permissions")

POST_CREATE = "post.create"
POST_UPDATE = "post.update"
POST_DELETE = "post.delete"            # soft delete (PENDING_DELETION)
POST_HARD_DELETE = "post.hard_delete"  # removes rows and poster
POST_CHANGE_STATUS = "post.change_status"
POST_ADMIN_LIST = "post.admin_list"
POST_READ_PRIVATE = "post.read_private"
REVIEW_DELETE = "review.delete"
SUBTITLE_DELETE = "subtitle.delete"

ROLE_PERMISSIONS = {
    Role.SUPER_ADMIN.value: {
        POST_CREATE, POST_UPDATE, POST_DELETE, POST_HARD_DELETE,
        POST_CHANGE_STATUS, POST_ADMIN_LIST, POST_READ_PRIVATE,
        REVIEW_DELETE, SUBTITLE_DELETE,
    },
    Role.USER_ADMIN.value: {
        POST_CREATE, POST_UPDATE, POST_DELETE,
        POST_CHANGE_STATUS, POST_ADMIN_LIST, POST_READ_PRIVATE,
    },
    Role.USER.value: {POST_CREATE},
}

# Permissions a USER_ADMIN only holds for posts they authored
OWN_POSTS_ONLY = {POST_DELETE, POST_CHANGE_STATUS}


def is_super_admin(user) -> bool:
    return user is not None and user.role == Role.SUPER_ADMIN.value


def has_permission(user, action: str) -> bool:
    if user is None:
        return False
    return action in ROLE_PERMISSIONS.get(user.role, set())


def can(actor, action: str, resource=None) -> bool:
    """Return True if ``actor`` may perform ``action`` on ``resource``.

    ``resource`` is a Post, Review or Subtitle depending on the action, or
    None for actions that don't target a single record.
    """
    if actor is None:
        return False

    if action == POST_UPDATE:
        # Editing: the author, or a super admin
        return is_super_admin(actor) or (resource is not None and resource.author_id == actor.id)

    if action == REVIEW_DELETE:
        return is_super_admin(actor) or (resource is not None and resource.user_id == actor.id)

    if action == SUBTITLE_DELETE:
        if is_super_admin(actor):
            return True
        return resource is not None and bool(actor.name) and resource.uploader_name == actor.name

    if not has_permission(actor, action):
        return False

    if action in OWN_POSTS_ONLY and not is_super_admin(actor):
        return resource is not None and resource.author_id == actor.id

    return True


def require(actor, action: str, resource=None, message: str | None = None):
    """Raise NotAuthenticated / NotAuthorized unless ``can`` allows it."""
    if actor is None:
        raise NotAuthenticated()
    if not can(actor, action, resource):
        logger.warning("Denied %s for user %s (role %s)", action, actor.id, actor.role)
        raise NotAuthorized(message)
