"""
Which posts a requester may see in listings.

``build_post_filters`` turns the requester and the listing filters into a list
of SQLAlchemy criteria that are ANDed together by the caller:

* anonymous: PUBLISHED and PUBLIC
* signed in: PUBLISHED and (PUBLIC or GROUP_ONLY in one of the user's
  active groups)
* super admin: every status and visibility

Time windows ("today", "this_week", "this_month") are computed from
``as_of``, which defaults to the wall clock at call time. Pass it explicitly
to get reproducible results across retries.
"""
import calendar
from datetime import datetime, timedelta

from sqlalchemy import and_, or_, literal
from sqlalchemy.orm import Session

from cineverse.dependencies import get_user_group_ids
from cineverse.models.post import Post, PostStatus, PostType, Visibility
from cineverse.permissions import POST_READ_PRIVATE, can, is_super_admin
from cineverse.schemas import PostFilters

SORT_FIELDS = {
    "updatedAt": Post.updated_at,
    "imdbRating": Post.imdb_rating,
}
SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT = "updatedAt-desc"

TIME_FILTERS = ("today", "this_week", "this_month", "all")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def time_window(time_filter: str | None, as_of: datetime | None = None):
    """Return (start, end) inclusive bounds for a time filter, or None.

    Weeks start on Sunday. ``end`` is the last microsecond of the window.
    """
    if not time_filter or time_filter == "all":
        return None
    now = as_of or datetime.utcnow()
    day = _start_of_day(now)
    tick = timedelta(microseconds=1)

    if time_filter == "today":
        return day, day + timedelta(days=1) - tick
    if time_filter == "this_week":
        start = day - timedelta(days=(day.weekday() + 1) % 7)
        return start, start + timedelta(days=7) - tick
    if time_filter == "this_month":
        start = day.replace(day=1)
        days_in_month = calendar.monthrange(start.year, start.month)[1]
        return start, start + timedelta(days=days_in_month) - tick
    return None


def visibility_criteria(db: Session, user):
    """Return (status_criterion, visibility_criterion) for the requester.

    Either part is None when it doesn't apply.
    """
    if is_super_admin(user):
        return None, None

    published = Post.status == PostStatus.PUBLISHED.value
    if user is None:
        return published, Post.visibility == Visibility.PUBLIC.value

    group_ids = get_user_group_ids(db, user.id)
    return published, or_(
        Post.visibility == Visibility.PUBLIC.value,
        and_(
            Post.visibility == Visibility.GROUP_ONLY.value,
            Post.group_id.in_(group_ids),
        ),
    )


def build_post_filters(db: Session, user, filters: PostFilters | None = None, as_of: datetime | None = None) -> list:
    filters = filters or PostFilters()
    status_criterion, visibility_criterion = visibility_criteria(db, user)
    criteria = []

    if filters.author_id is not None:
        criteria.append(Post.author_id == filters.author_id)
        private_allowed = filters.include_private and user is not None and (
            user.id == filters.author_id or can(user, POST_READ_PRIVATE)
        )
        if private_allowed:
            status_criterion = Post.status != PostStatus.PENDING_DELETION.value
        else:
            status_criterion = Post.status == PostStatus.PUBLISHED.value

    if status_criterion is not None:
        criteria.append(status_criterion)
    if visibility_criterion is not None:
        criteria.append(visibility_criterion)

    genres = [g.strip() for g in filters.genres if g and g.strip()]
    if genres:
        # Exact token match against the comma-joined column
        wrapped = literal(",") + Post.genres + literal(",")
        criteria.append(or_(*[
            wrapped.like(f"%,{_escape_like(g)},%", escape="\\") for g in genres
        ]))

    if filters.year_range:
        low, high = filters.year_range
        criteria.append(Post.year.between(low, high))

    if filters.rating_range:
        low, high = filters.rating_range
        criteria.append(Post.imdb_rating.between(low, high))

    window = time_window(filters.time_filter, as_of)
    if window:
        start, end = window
        criteria.append(Post.created_at.between(start, end))

    if filters.type and filters.type.upper() in PostType.__members__:
        criteria.append(Post.type == filters.type.upper())

    if filters.search and filters.search.strip():
        term = f"%{_escape_like(filters.search.strip())}%"
        criteria.append(or_(
            Post.title.ilike(term, escape="\\"),
            Post.description.ilike(term, escape="\\"),
            Post.genres.ilike(term, escape="\\"),
        ))

    return criteria


def build_order_by(sort_by: str | None) -> list:
    """Allow-listed ordering. Unknown fields or directions fall back to updatedAt desc."""
    field, _, direction = (sort_by or DEFAULT_SORT).partition("-")
    if field not in SORT_FIELDS or direction not in SORT_DIRECTIONS:
        field, direction = "updatedAt", "desc"
    column = SORT_FIELDS[field]
    primary = column.asc() if direction == "asc" else column.desc()
    # Stable order across pages when the sort key ties
    return [primary, Post.id.desc()]


def can_view_post(db: Session, user, post: Post) -> bool:
    if is_super_admin(user):
        return True
    if user is not None and post.author_id == user.id:
        return True
    if post.status != PostStatus.PUBLISHED.value:
        return False
    if post.visibility == Visibility.PUBLIC.value:
        return True
    if user is None:
        return False
    return post.group_id in get_user_group_ids(db, user.id)
