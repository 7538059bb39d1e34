from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from cineverse.database import Base
import enum

class Role(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"   # full control, hard deletes
    USER_ADMIN = "USER_ADMIN"     # manages own posts
    USER = "USER"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    image = Column(String(500), nullable=True)
    role = Column(String(50), default=Role.USER.value, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    posts = relationship("Post", back_populates="author")
    reviews = relationship("Review", back_populates="user")
    favorite_posts = relationship("FavoritePost", back_populates="user")
    group_memberships = relationship("GroupMember", back_populates="user")

    # Likes / dislikes (many-to-many, see models/post.py)
    liked_posts = relationship("Post", secondary="post_likes", back_populates="liked_by")
    disliked_posts = relationship("Post", secondary="post_dislikes", back_populates="disliked_by")
