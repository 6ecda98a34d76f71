# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Post, Tag and the post_tags association."""

from sqlalchemy import Column, Integer, String, Text, Enum, JSON, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core import clock
from database import Base

POST_STATUSES = ("draft", "published", "archived")

# Cascade delete on both sides: dropping a post or a tag drops its links.
post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)                    # markdown source
    excerpt = Column(Text, nullable=True)
    # Display names in author-chosen order; post_tags mirrors them
    tags = Column(JSON, nullable=False, default=list)
    status = Column(Enum(*POST_STATUSES, name="post_status"), nullable=False, default="draft", index=True)
    author_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Set once, on the first transition into "published"
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=clock.utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=clock.utc_now,
        server_default=func.now(),
        onupdate=clock.utc_now,
        nullable=False,
    )

    author = relationship("User", lazy="joined")
    tag_rows = relationship("Tag", secondary=post_tags, back_populates="posts")
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    posts = relationship("Post", secondary=post_tags, back_populates="tag_rows")
