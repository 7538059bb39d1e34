"""
Moderation states of a post.

    DRAFT -> PENDING_APPROVAL -> PUBLISHED -> PENDING_DELETION -> (hard delete)

Saving a post (create or edit) always lands in PENDING_APPROVAL. Admins move
posts between states with ``update_post_status``. Nothing leaves
PENDING_DELETION except the hard delete.
"""
from cineverse.errors import InvalidArgument
from cineverse.models.post import PostStatus

STATUS_AFTER_SAVE = PostStatus.PENDING_APPROVAL


def parse_status(value) -> PostStatus:
    try:
        return PostStatus(value)
    except ValueError:
        raise InvalidArgument(f"Invalid status: {value}")


def is_terminal(status: str) -> bool:
    return status == PostStatus.PENDING_DELETION.value


def check_transition(current: str, target: PostStatus):
    if is_terminal(current) and target != PostStatus.PENDING_DELETION:
        raise InvalidArgument("Post is pending deletion and can only be removed")


def check_editable(current: str):
    if is_terminal(current):
        raise InvalidArgument("Post is pending deletion and can no longer be edited")
