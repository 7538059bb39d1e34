from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from cineverse.database import Base
import enum

class PostType(str, enum.Enum):
    MOVIE = "MOVIE"
    TV_SERIES = "TV_SERIES"
    OTHER = "OTHER"

class PostStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    PUBLISHED = "PUBLISHED"
    PENDING_DELETION = "PENDING_DELETION"

class Visibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    GROUP_ONLY = "GROUP_ONLY"   # requires group_id


def split_genres(value: str | None) -> list[str]:
    """Storage form (comma-joined) to list."""
    if not value:
        return []
    return [g.strip() for g in value.split(",") if g.strip()]


def join_genres(genres) -> str | None:
    """List to storage form. Trims, drops empties, keeps first occurrence."""
    if not genres:
        return None
    seen = []
    for genre in genres:
        genre = genre.strip()
        if genre and genre not in seen:
            seen.append(genre)
    return ",".join(seen) if seen else None


post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)

post_dislikes = Table(
    "post_dislikes",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    poster_url = Column(String(500), nullable=True)
    year = Column(Integer, nullable=True, index=True)
    duration = Column(Integer, nullable=True)  # minutes
    genres = Column(Text, nullable=True)       # comma-joined, use split_genres/join_genres
    directors = Column(String(500), nullable=True)
    main_cast = Column(Text, nullable=True)
    imdb_rating = Column(Float, nullable=True, index=True)
    rotten_tomatoes_rating = Column(Integer, nullable=True)
    google_rating = Column(Integer, nullable=True)
    view_count = Column(Integer, default=0)

    type = Column(String(20), default=PostType.MOVIE.value, nullable=False)
    status = Column(String(30), default=PostStatus.PENDING_APPROVAL.value, nullable=False, index=True)
    visibility = Column(String(20), default=Visibility.PUBLIC.value, nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True)  # set iff GROUP_ONLY

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True)
    order_in_series = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    author = relationship("User", back_populates="posts")
    group = relationship("Group", back_populates="posts")
    series = relationship("Series", back_populates="posts")
    reviews = relationship("Review", back_populates="post")
    favorites = relationship("FavoritePost", back_populates="post")
    subtitles = relationship("Subtitle", back_populates="post")
    media_links = relationship("MediaLink", back_populates="post", order_by="MediaLink.id")
    views = relationship("PostView", back_populates="post")

    liked_by = relationship("User", secondary=post_likes, back_populates="liked_posts")
    disliked_by = relationship("User", secondary=post_dislikes, back_populates="disliked_posts")


class MediaLink(Base):
    """Trailer or image attached to a post"""
    __tablename__ = "media_links"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False)
    type = Column(String(20), default="image")  # trailer or image
    url = Column(String(500), nullable=False)

    post = relationship("Post", back_populates="media_links")


class PostView(Base):
    """One row per viewer: user_id for members, ip for guests"""
    __tablename__ = "post_views"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    ip = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="views")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_view_user"),
    )
