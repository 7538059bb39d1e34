"""
Post listing, detail, save, moderation status and deletion.
"""
import logging
import math
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from cineverse.actions.reviews import get_review_tree
from cineverse.cache import invalidate_post_cache
from cineverse.config import settings
from cineverse.errors import InvalidArgument, NotAuthenticated, NotAuthorized, NotFound
from cineverse.lifecycle import STATUS_AFTER_SAVE, check_editable, check_transition, parse_status
from cineverse.models import (
    FavoritePost, Group, MediaLink, Post, PostStatus, PostView, Review, Series,
    Subtitle, Visibility, join_genres, post_dislikes, post_likes,
)
from cineverse.permissions import (
    POST_ADMIN_LIST, POST_CHANGE_STATUS, POST_CREATE, POST_DELETE,
    POST_HARD_DELETE, POST_UPDATE, can, has_permission, is_super_admin, require,
)
from cineverse.schemas import (
    MediaLinkOut, PostDetail, PostFilters, PostForm, PostPage, PostSummary,
    SubtitleOut, UserOut,
)
from cineverse.storage import delete_uploaded_file, save_image_from_data_url
from cineverse.visibility import build_order_by, build_post_filters, can_view_post, visibility_criteria

logger = logging.getLogger("cineverse.posts")

ADMIN_SORT_FIELDS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "imdbRating": Post.imdb_rating,
}

_summary_options = (selectinload(Post.author), selectinload(Post.series))


def _page_bounds(page: int | None, limit: int | None) -> tuple[int, int]:
    page = max(page or 1, 1)
    limit = limit or settings.DEFAULT_PAGE_SIZE
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return page, limit


def _paginate(query, order_by: list, page: int | None, limit: int | None) -> PostPage:
    """Offset pagination: skip = (page - 1) * limit."""
    page, limit = _page_bounds(page, limit)
    total = query.count()
    posts = query.options(*_summary_options).order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return PostPage(
        items=[PostSummary.model_validate(p) for p in posts],
        total_pages=math.ceil(total / limit),
        total_count=total,
    )


# ==================== READ ====================

def list_posts(db: Session, user, page: int = 1, limit: int | None = None,
               filters: PostFilters | None = None, as_of: datetime | None = None) -> PostPage:
    filters = filters or PostFilters()
    criteria = build_post_filters(db, user, filters, as_of=as_of)
    query = db.query(Post).filter(and_(*criteria)) if criteria else db.query(Post)
    return _paginate(query, build_order_by(filters.sort_by), page, limit)


def get_post(db: Session, user, post_id: int) -> PostDetail | None:
    """Full post with reviews, reactions and the caller's favorite flag.

    Returns None when the post doesn't exist or the caller may not see it.
    """
    post = db.query(Post).options(
        selectinload(Post.author),
        selectinload(Post.series),
        selectinload(Post.liked_by),
        selectinload(Post.disliked_by),
        selectinload(Post.media_links),
        selectinload(Post.subtitles),
    ).filter(Post.id == post_id).first()

    if not post or not can_view_post(db, user, post):
        return None

    is_favorite = False
    if user is not None:
        is_favorite = db.query(FavoritePost.id).filter(
            FavoritePost.user_id == user.id,
            FavoritePost.post_id == post_id
        ).first() is not None

    summary = PostSummary.model_validate(post)
    return PostDetail(
        **summary.model_dump(),
        duration=post.duration,
        directors=post.directors,
        main_cast=post.main_cast,
        rotten_tomatoes_rating=post.rotten_tomatoes_rating,
        google_rating=post.google_rating,
        media_links=[MediaLinkOut.model_validate(m) for m in post.media_links],
        subtitles=[SubtitleOut.model_validate(s) for s in post.subtitles],
        reviews=get_review_tree(db, post.id),
        liked_by=[UserOut.model_validate(u) for u in post.liked_by],
        disliked_by=[UserOut.model_validate(u) for u in post.disliked_by],
        is_favorite=is_favorite,
    )


def get_posts_for_admin(db: Session, user, page: int = 1, limit: int | None = None,
                        status: str | None = None, sort_by: str = "createdAt-desc") -> PostPage:
    """Management listing: USER_ADMIN sees own posts, SUPER_ADMIN sees all."""
    require(user, POST_ADMIN_LIST, message="Not authorized to manage posts.")

    query = db.query(Post)
    if not is_super_admin(user):
        query = query.filter(Post.author_id == user.id)
    if status:
        query = query.filter(Post.status == parse_status(status).value)

    field, _, direction = (sort_by or "").partition("-")
    column = ADMIN_SORT_FIELDS.get(field, Post.created_at)
    primary = column.asc() if direction == "asc" else column.desc()
    return _paginate(query, [primary, Post.id.desc()], page, limit)


def get_posts_by_series_id(db: Session, user, series_id: int) -> list[PostSummary]:
    """Parts of a series the caller may see, in series order."""
    criteria = [c for c in visibility_criteria(db, user) if c is not None]
    posts = db.query(Post).options(*_summary_options).filter(
        Post.series_id == series_id,
        Post.status != PostStatus.PENDING_DELETION.value,
        *criteria
    ).order_by(Post.order_in_series.asc(), Post.id.asc()).all()
    return [PostSummary.model_validate(p) for p in posts]


def increment_view_count(db: Session, user, post_id: int, ip: str | None = None) -> bool:
    """Count one view per user (or per IP for guests). Never raises."""
    try:
        post = db.get(Post, post_id)
        if not post or not can_view_post(db, user, post):
            return False

        views = db.query(PostView.id).filter(PostView.post_id == post_id)
        if user is not None:
            views = views.filter(PostView.user_id == user.id)
        else:
            views = views.filter(PostView.user_id.is_(None), PostView.ip == ip)
        if views.first() is not None:
            return False

        db.add(PostView(post_id=post_id, user_id=user.id if user else None, ip=ip))
        post.view_count = Post.view_count + 1
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error incrementing view count for post %s: %s", post_id, e)
        return False


# ==================== WRITE ====================

def _post_values(db: Session, data: PostForm) -> dict:
    group_id = None
    if data.visibility == Visibility.GROUP_ONLY:
        if data.group_id is None:
            raise InvalidArgument("Group-only posts need a group")
        if not db.get(Group, data.group_id):
            raise NotFound.resource("Group")
        group_id = data.group_id

    if data.series_id is not None and not db.get(Series, data.series_id):
        raise NotFound.resource("Series")

    return {
        "title": data.title.strip(),
        "description": data.description,
        "year": data.year,
        "duration": data.duration,
        "genres": join_genres(data.genres),
        "directors": data.directors,
        "main_cast": data.main_cast,
        "imdb_rating": data.imdb_rating,
        "rotten_tomatoes_rating": data.rotten_tomatoes_rating,
        "google_rating": data.google_rating,
        "type": data.type.value,
        "series_id": data.series_id,
        "order_in_series": data.order_in_series,
        "visibility": data.visibility.value,
        "group_id": group_id,
        # Every change goes back through approval, whatever the form says
        "status": STATUS_AFTER_SAVE.value,
        "updated_at": datetime.utcnow(),
    }


def save_post(db: Session, user, data: PostForm, post_id: int | None = None) -> Post:
    """Create a post, or edit ``post_id``. The result is always PENDING_APPROVAL."""
    if user is None:
        raise NotAuthenticated("User not authenticated")

    existing = None
    if post_id is not None:
        existing = db.get(Post, post_id)
        if not existing:
            raise NotFound.resource("Post")
        require(user, POST_UPDATE, existing, "You can only edit your own posts.")
        check_editable(existing.status)
    else:
        require(user, POST_CREATE)

    if data.status and data.status != STATUS_AFTER_SAVE.value:
        logger.debug("Ignoring requested status %s on save", data.status)

    # Validate before storing anything
    values = _post_values(db, data)
    poster_url = save_image_from_data_url(data.poster_url, "posts")
    is_upload = bool(data.poster_url) and data.poster_url.startswith("data:image")
    if is_upload and poster_url is None:
        raise InvalidArgument("Invalid poster image")
    values["poster_url"] = poster_url
    # Written just now, removed again if the commit fails
    new_file = poster_url if is_upload else None

    if existing is None:
        post = Post(**values, author_id=user.id)
        post.media_links = [MediaLink(type=link.type, url=link.url) for link in data.media_links]
        try:
            db.add(post)
            db.commit()
        except Exception:
            db.rollback()
            delete_uploaded_file(new_file)
            raise
        db.refresh(post)
        logger.info("User %s created post %s", user.id, post.id)
    else:
        post = existing
        old_poster = post.poster_url
        try:
            db.query(MediaLink).filter(MediaLink.post_id == post.id).delete(synchronize_session=False)
            for key, value in values.items():
                setattr(post, key, value)
            for link in data.media_links:
                db.add(MediaLink(post_id=post.id, type=link.type, url=link.url))
            db.commit()
        except Exception:
            db.rollback()
            delete_uploaded_file(new_file)
            raise
        db.refresh(post)
        if old_poster and old_poster != post.poster_url:
            delete_uploaded_file(old_poster)
        logger.info("User %s updated post %s", user.id, post.id)

    invalidate_post_cache(post.id, post.series_id, post.author_id)
    return post


def update_post_status(db: Session, user, post_id: int, status: str) -> Post:
    if user is None:
        raise NotAuthenticated()
    if not has_permission(user, POST_CHANGE_STATUS):
        raise NotAuthorized("Not authorized to change post status.")

    target = parse_status(status)

    post = db.get(Post, post_id)
    if not post:
        raise NotFound.resource("Post")

    require(user, POST_CHANGE_STATUS, post, "You can only manage status for your own posts.")
    check_transition(post.status, target)

    previous = post.status
    post.status = target.value
    db.commit()
    db.refresh(post)

    logger.info("User %s moved post %s from %s to %s", user.id, post_id, previous, target.value)
    invalidate_post_cache(post_id)
    return post


def hard_delete_post(db: Session, post: Post) -> None:
    """Remove a post and every row referencing it in one transaction,
    then the poster file (best effort, not rolled back on failure)."""
    post_id = post.id
    poster_url = post.poster_url
    try:
        db.query(FavoritePost).filter(FavoritePost.post_id == post_id).delete(synchronize_session=False)
        db.query(Review).filter(Review.post_id == post_id).delete(synchronize_session=False)
        db.query(Subtitle).filter(Subtitle.post_id == post_id).delete(synchronize_session=False)
        db.query(MediaLink).filter(MediaLink.post_id == post_id).delete(synchronize_session=False)
        db.query(PostView).filter(PostView.post_id == post_id).delete(synchronize_session=False)
        db.execute(post_likes.delete().where(post_likes.c.post_id == post_id))
        db.execute(post_dislikes.delete().where(post_dislikes.c.post_id == post_id))
        db.query(Post).filter(Post.id == post_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    delete_uploaded_file(poster_url)


def delete_post(db: Session, user, post_id: int) -> None:
    """SUPER_ADMIN removes the post for good; USER_ADMIN marks own posts PENDING_DELETION."""
    if user is None:
        raise NotAuthenticated("Not authorized.")

    post = db.get(Post, post_id)
    if not post:
        raise NotFound.resource("Post")

    require(user, POST_DELETE, post, "Not authorized to delete this post.")

    series_id, author_id = post.series_id, post.author_id
    if can(user, POST_HARD_DELETE, post):
        hard_delete_post(db, post)
        logger.info("User %s permanently deleted post %s", user.id, post_id)
    else:
        post.status = PostStatus.PENDING_DELETION.value
        db.commit()
        logger.info("User %s marked post %s for deletion", user.id, post_id)

    invalidate_post_cache(post_id, series_id, author_id)
