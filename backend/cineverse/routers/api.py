from typing import List, Optional

from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from cineverse import actions
from cineverse.database import get_db
from cineverse.dependencies import get_current_user_optional
from cineverse.errors import NotAuthenticated, NotFound
from cineverse.models import Post, User, Subtitle
from cineverse.schemas import (
    FavoriteState, LikeIn, LikeState, PostDetail, PostFilters, PostForm,
    PostPage, PostSummary, ReviewIn, ReviewNode, StatusIn, SubtitleIn, SubtitleOut,
)
from cineverse.visibility import can_view_post

router = APIRouter(prefix="/api", tags=["api"])


def _range(low, high):
    if low is None and high is None:
        return None
    return (low if low is not None else 0, high if high is not None else 10**6)


# ==================== POSTS ====================

@router.get("/posts", response_model=PostPage)
async def list_posts(
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    genres: List[str] = Query([]),
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
    rating_min: Optional[float] = None,
    rating_max: Optional[float] = None,
    time_filter: Optional[str] = None,
    type: Optional[str] = None,
    author_id: Optional[int] = None,
    include_private: bool = False,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    filters = PostFilters(
        sort_by=sort_by,
        genres=genres,
        year_range=_range(year_min, year_max),
        rating_range=_range(rating_min, rating_max),
        time_filter=time_filter,
        type=type,
        author_id=author_id,
        include_private=include_private,
        search=search,
    )
    return actions.list_posts(db, user, page=page, limit=limit, filters=filters)

@router.get("/posts/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    post = actions.get_post(db, user, post_id)
    if post is None:
        raise NotFound.resource("Post")
    return post

@router.post("/posts")
async def create_post(
    data: PostForm,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    post = actions.save_post(db, user, data)
    return {"id": post.id, "status": post.status}

@router.put("/posts/{post_id}")
async def edit_post(
    post_id: int,
    data: PostForm,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    post = actions.save_post(db, user, data, post_id=post_id)
    return {"id": post.id, "status": post.status}

@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    actions.delete_post(db, user, post_id)
    return {"message": "Deleted"}

@router.post("/posts/{post_id}/status")
async def update_post_status(
    post_id: int,
    body: StatusIn,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    post = actions.update_post_status(db, user, post_id, body.status)
    return {"id": post.id, "status": post.status}

@router.post("/posts/{post_id}/view")
async def count_view(
    post_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or (request.client.host if request.client else None)
    counted = actions.increment_view_count(db, user, post_id, ip=ip)
    return {"counted": counted}

@router.get("/manage/posts", response_model=PostPage)
async def manage_posts(
    page: int = 1,
    limit: Optional[int] = None,
    status: Optional[str] = None,
    sort_by: str = "createdAt-desc",
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.get_posts_for_admin(db, user, page=page, limit=limit, status=status, sort_by=sort_by)

@router.get("/series/{series_id}/posts", response_model=List[PostSummary])
async def series_posts(
    series_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.get_posts_by_series_id(db, user, series_id)


# ==================== LIKES & FAVORITES ====================

@router.post("/posts/{post_id}/like", response_model=LikeState)
async def like_post(
    post_id: int,
    body: LikeIn,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    """Like (like=true) or dislike (like=false). Repeating a reaction removes it."""
    return actions.toggle_like_post(db, user, post_id, like=body.like)

@router.post("/posts/{post_id}/favorite", response_model=FavoriteState)
async def favorite_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.toggle_favorite_post(db, user, post_id)

@router.get("/favorites", response_model=List[PostSummary])
async def my_favorites(
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.get_favorite_posts(db, user)

@router.get("/users/{user_id}/favorites", response_model=List[PostSummary])
async def user_favorites(
    user_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.get_favorite_posts_by_user_id(db, user, user_id)


# ==================== REVIEWS ====================

@router.get("/posts/{post_id}/reviews", response_model=List[ReviewNode])
async def list_reviews(
    post_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    post = db.get(Post, post_id)
    if not post or not can_view_post(db, user, post):
        raise NotFound.resource("Post")
    return actions.get_review_tree(db, post_id)

@router.post("/posts/{post_id}/reviews", response_model=ReviewNode)
async def create_review(
    post_id: int,
    body: ReviewIn,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.create_review(db, user, post_id, body.comment, body.rating, parent_id=body.parent_id)

@router.delete("/reviews/{review_id}")
async def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    actions.delete_review(db, user, review_id)
    return {"message": "Deleted"}


# ==================== SUBTITLES ====================

@router.post("/posts/{post_id}/subtitles", response_model=SubtitleOut)
async def add_subtitle(
    post_id: int,
    body: SubtitleIn,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    return actions.create_subtitle(db, user, post_id, body.language, body.url)

@router.delete("/subtitles/{subtitle_id}")
async def remove_subtitle(
    subtitle_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    actions.delete_subtitle(db, user, subtitle_id)
    return {"message": "Deleted"}

@router.get("/subtitles/{subtitle_id}/download")
async def download_subtitle(
    subtitle_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user_optional)
):
    if not actions.can_user_download_subtitle(user):
        raise NotAuthenticated("Sign in to download subtitles")
    subtitle = db.get(Subtitle, subtitle_id)
    if not subtitle:
        raise NotFound.resource("Subtitle")
    return RedirectResponse(url=subtitle.url, status_code=302)
