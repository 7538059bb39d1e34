"""
Threaded reviews.

Top-level reviews carry the rating; replies always store 0. A review tree is
read newest root first, with replies nested ``REVIEW_TREE_DEPTH`` levels deep
(oldest reply first). Deleting a review removes its whole subtree, children
before parents.
"""
import logging

from sqlalchemy.orm import Session, selectinload

from cineverse.cache import invalidate_post_cache
from cineverse.errors import InvalidArgument, NotAuthenticated, NotFound
from cineverse.models import Post, Review
from cineverse.permissions import REVIEW_DELETE, require
from cineverse.schemas import ReviewNode, UserOut

logger = logging.getLogger("cineverse.reviews")

REVIEW_TREE_DEPTH = 3


def review_node(review: Review, depth: int = REVIEW_TREE_DEPTH) -> ReviewNode:
    """Serialize a review with at most ``depth`` levels of replies below it."""
    replies = [review_node(reply, depth - 1) for reply in review.replies] if depth > 0 else []
    return ReviewNode(
        id=review.id,
        post_id=review.post_id,
        parent_id=review.parent_id,
        comment=review.comment,
        rating=review.rating,
        created_at=review.created_at,
        user=UserOut.model_validate(review.user),
        replies=replies,
    )


def _tree_load_options(depth: int) -> list:
    options = [selectinload(Review.user)]
    for level in range(1, depth + 1):
        option = selectinload(Review.replies)
        for _ in range(level - 1):
            option = option.selectinload(Review.replies)
        options.append(option.selectinload(Review.user))
    return options


def get_review_tree(db: Session, post_id: int, depth: int = REVIEW_TREE_DEPTH) -> list[ReviewNode]:
    roots = db.query(Review).options(*_tree_load_options(depth)).filter(
        Review.post_id == post_id,
        Review.parent_id.is_(None)
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()
    return [review_node(root, depth) for root in roots]


def create_review(db: Session, user, post_id: int, comment: str, rating: int, parent_id: int | None = None) -> ReviewNode:
    if user is None:
        raise NotAuthenticated("You must be logged in to post a review.")

    post = db.get(Post, post_id)
    if not post:
        raise NotFound.resource("Post")

    if parent_id is not None:
        parent = db.get(Review, parent_id)
        if not parent:
            raise NotFound.resource("Parent review")
        if parent.post_id != post_id:
            raise InvalidArgument("Parent review belongs to a different post")

    if not comment or not comment.strip():
        raise InvalidArgument("Review cannot be empty")

    review = Review(
        post_id=post_id,
        user_id=user.id,
        parent_id=parent_id,
        comment=comment.strip(),
        # Replies don't carry a rating of their own
        rating=0 if parent_id is not None else rating,
    )
    db.add(review)
    db.commit()
    db.refresh(review)

    logger.info("User %s added review %s on post %s (parent %s)", user.id, review.id, post_id, parent_id)
    invalidate_post_cache(post_id)
    return review_node(review)


def collect_subtree_ids(db: Session, root_id: int) -> list[list[int]]:
    """IDs of a review subtree grouped by depth, root level first.

    One query per level rather than one per node.
    """
    levels = [[root_id]]
    frontier = [root_id]
    while frontier:
        frontier = [row.id for row in db.query(Review.id).filter(Review.parent_id.in_(frontier)).all()]
        if frontier:
            levels.append(frontier)
    return levels


def delete_review_subtree(db: Session, root_id: int) -> int:
    """Delete a review and all of its descendants, deepest level first.

    Does not commit.
    """
    deleted = 0
    for level in reversed(collect_subtree_ids(db, root_id)):
        deleted += db.query(Review).filter(Review.id.in_(level)).delete(synchronize_session=False)
    return deleted


def delete_review(db: Session, user, review_id: int) -> None:
    if user is None:
        raise NotAuthenticated()

    review = db.get(Review, review_id)
    if not review:
        raise NotFound.resource("Review")

    require(user, REVIEW_DELETE, review, "You are not authorized to delete this review.")

    post_id = review.post_id
    try:
        deleted = delete_review_subtree(db, review_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("User %s deleted review %s (%d rows)", user.id, review_id, deleted)
    invalidate_post_cache(post_id)
