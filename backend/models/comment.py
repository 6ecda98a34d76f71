# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Comment ORM model."""

import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core import clock
from database import Base

COMMENT_STATUSES = ("pending", "approved", "rejected")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # One level of nesting only: a parent is always a top-level comment.
    parent_id = Column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    author_name = Column(String(100), nullable=False)
    author_email = Column(String(255), nullable=False, index=True)   # never shown publicly
    content = Column(Text, nullable=False)                           # sanitised plain text
    status = Column(Enum(*COMMENT_STATUSES, name="comment_status"), nullable=False, default="pending", index=True)
    ip_address = Column(String(45), nullable=True)
    spam_suspected = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=clock.utc_now, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="comments")

    @property
    def post_slug(self) -> str:
        return self.post.slug if self.post else ""
