from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from cineverse.database import Base

class Review(Base):
    """Top-level review (parent_id NULL, carries the rating) or a reply (rating 0)"""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    parent_id = Column(Integer, ForeignKey("reviews.id"), nullable=True, index=True)
    comment = Column(Text, nullable=False)
    rating = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    post = relationship("Post", back_populates="reviews")
    user = relationship("User", back_populates="reviews")
    parent = relationship("Review", remote_side=[id], back_populates="replies")
    replies = relationship("Review", back_populates="parent", order_by="Review.created_at")
