from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from cineverse.database import Base

class FavoritePost(Base):
    __tablename__ = "favorite_posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="favorite_posts")
    post = relationship("Post", back_populates="favorites")

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_user_post_favorite"),
    )
