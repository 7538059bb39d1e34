"""
Like / dislike and favorite toggles.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from cineverse.cache import revalidate_path
from cineverse.errors import NotAuthenticated, NotFound
from cineverse.models import FavoritePost, Post, User
from cineverse.schemas import FavoriteState, LikeState, PostSummary
from cineverse.visibility import visibility_criteria

logger = logging.getLogger("cineverse.favorites")


def _remove_user(collection, user_id: int):
    for member in list(collection):
        if member.id == user_id:
            collection.remove(member)


def toggle_like_post(db: Session, user, post_id: int, like: bool = True) -> LikeState:
    """Like (``like=True``) or dislike a post.

    Repeating the same reaction takes it back. Switching reactions drops the
    other one. Both changes are committed together.
    """
    if user is None:
        raise NotAuthenticated()

    post = db.query(Post).options(
        selectinload(Post.liked_by),
        selectinload(Post.disliked_by)
    ).filter(Post.id == post_id).first()
    if not post:
        raise NotFound.resource("Post")

    is_liked = any(u.id == user.id for u in post.liked_by)
    is_disliked = any(u.id == user.id for u in post.disliked_by)
    member = db.get(User, user.id)

    if like:
        if is_liked:
            _remove_user(post.liked_by, user.id)
        else:
            post.liked_by.append(member)
            if is_disliked:
                _remove_user(post.disliked_by, user.id)
    else:
        if is_disliked:
            _remove_user(post.disliked_by, user.id)
        else:
            post.disliked_by.append(member)
            if is_liked:
                _remove_user(post.liked_by, user.id)

    db.commit()

    state = LikeState(
        post_id=post_id,
        liked=any(u.id == user.id for u in post.liked_by),
        disliked=any(u.id == user.id for u in post.disliked_by),
        likes=len(post.liked_by),
        dislikes=len(post.disliked_by),
    )
    logger.info("User %s reacted to post %s: liked=%s disliked=%s", user.id, post_id, state.liked, state.disliked)
    revalidate_path(f"/movies/{post_id}")
    return state


def toggle_favorite_post(db: Session, user, post_id: int) -> FavoriteState:
    if user is None:
        raise NotAuthenticated()

    if not db.get(Post, post_id):
        raise NotFound.resource("Post")

    existing = db.query(FavoritePost).filter(
        FavoritePost.user_id == user.id,
        FavoritePost.post_id == post_id
    ).first()

    if existing:
        db.delete(existing)
        db.commit()
        favorited = False
    else:
        db.add(FavoritePost(user_id=user.id, post_id=post_id))
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created the row first
            db.rollback()
        favorited = True

    logger.info("User %s favorite on post %s: %s", user.id, post_id, favorited)
    revalidate_path(f"/movies/{post_id}")
    revalidate_path("/favorites")
    revalidate_path(f"/profile/{user.id}")
    return FavoriteState(post_id=post_id, favorited=favorited)


def _favorites(db: Session, user_id: int, criteria) -> list[PostSummary]:
    favorites = db.query(FavoritePost).join(FavoritePost.post).options(
        selectinload(FavoritePost.post).selectinload(Post.author),
        selectinload(FavoritePost.post).selectinload(Post.series),
    ).filter(
        FavoritePost.user_id == user_id,
        *criteria
    ).order_by(FavoritePost.created_at.desc(), FavoritePost.id.desc()).all()
    return [PostSummary.model_validate(f.post) for f in favorites]


def get_favorite_posts_by_user_id(db: Session, user, user_id: int) -> list[PostSummary]:
    """Another user's favorites as ``user`` may see them, most recently favorited first."""
    criteria = [c for c in visibility_criteria(db, user) if c is not None]
    return _favorites(db, user_id, criteria)


def get_favorite_posts(db: Session, user) -> list[PostSummary]:
    """The caller's own favorites, whatever their status."""
    if user is None:
        return []
    return _favorites(db, user.id, [])
