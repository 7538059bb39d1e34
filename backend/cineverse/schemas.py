from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cineverse.models.post import PostType, Visibility, split_genres


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: str


class MediaLinkIn(BaseModel):
    type: Literal["trailer", "image"] = "image"
    url: str


class MediaLinkOut(MediaLinkIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class SeriesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None


class SubtitleIn(BaseModel):
    language: str = Field(min_length=1)
    url: str = Field(min_length=1)


class SubtitleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    language: str
    uploader_name: str
    url: str
    created_at: datetime


class ReviewNode(BaseModel):
    """A review with its replies, nested to a fixed depth."""
    id: int
    post_id: int
    parent_id: Optional[int] = None
    comment: str
    rating: int
    created_at: datetime
    user: UserOut
    replies: List["ReviewNode"] = []


class ReviewIn(BaseModel):
    comment: str = Field(min_length=1)
    rating: int = Field(default=0, ge=0)
    parent_id: Optional[int] = None


class PostForm(BaseModel):
    """Create/edit payload. ``status`` is accepted but never honored."""
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    poster_url: Optional[str] = None  # stored path or data:image URL
    year: Optional[int] = None
    duration: Optional[int] = None
    genres: List[str] = []
    directors: Optional[str] = None
    main_cast: Optional[str] = None
    imdb_rating: Optional[float] = None
    rotten_tomatoes_rating: Optional[int] = None
    google_rating: Optional[int] = None
    type: PostType = PostType.MOVIE
    series_id: Optional[int] = None
    order_in_series: Optional[int] = None
    visibility: Visibility = Visibility.PUBLIC
    group_id: Optional[int] = None
    media_links: List[MediaLinkIn] = []
    status: Optional[str] = None


class PostFilters(BaseModel):
    sort_by: Optional[str] = None            # e.g. "updatedAt-desc", "imdbRating-asc"
    genres: List[str] = []
    year_range: Optional[Tuple[int, int]] = None
    rating_range: Optional[Tuple[float, float]] = None
    time_filter: Optional[str] = None        # today, this_week, this_month, all
    type: Optional[str] = None
    author_id: Optional[int] = None
    include_private: bool = False
    search: Optional[str] = None


class PostSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    poster_url: Optional[str] = None
    year: Optional[int] = None
    genres: List[str] = []
    imdb_rating: Optional[float] = None
    type: str
    status: str
    visibility: str
    group_id: Optional[int] = None
    author: UserOut
    series: Optional[SeriesOut] = None
    order_in_series: Optional[int] = None
    view_count: int = 0
    created_at: datetime
    updated_at: datetime

    @field_validator("genres", mode="before")
    @classmethod
    def _split_genres(cls, value):
        if value is None or isinstance(value, str):
            return split_genres(value)
        return value

    @field_validator("view_count", mode="before")
    @classmethod
    def _default_view_count(cls, value):
        return value or 0


class PostPage(BaseModel):
    items: List[PostSummary]
    total_pages: int
    total_count: int


class PostDetail(PostSummary):
    duration: Optional[int] = None
    directors: Optional[str] = None
    main_cast: Optional[str] = None
    rotten_tomatoes_rating: Optional[int] = None
    google_rating: Optional[int] = None
    media_links: List[MediaLinkOut] = []
    subtitles: List[SubtitleOut] = []
    reviews: List[ReviewNode] = []
    liked_by: List[UserOut] = []
    disliked_by: List[UserOut] = []
    is_favorite: bool = False


class StatusIn(BaseModel):
    status: str


class LikeIn(BaseModel):
    like: bool = True


class LikeState(BaseModel):
    post_id: int
    liked: bool
    disliked: bool
    likes: int
    dislikes: int


class FavoriteState(BaseModel):
    post_id: int
    favorited: bool
