# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Read side for public pages.  Only ``published`` posts are ever returned;
drafts and archived posts do not exist as far as this module is concerned.
"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from core.errors import NotFoundError
from models.post import Post
from posts.content import reading_time, render_markdown
from posts.schemas import PostDetail, PostMetadata

ANONYMOUS = "Anonymous"


def _published():
    return Post.status == "published"


def _newest_first():
    # Never-published rows are filtered out already; created_at is the fallback
    return func.coalesce(Post.published_at, Post.created_at).desc()


def _author_name(post: Post) -> str:
    if post.author is not None and post.author.full_name:
        return post.author.full_name
    return ANONYMOUS


def to_metadata(post: Post) -> PostMetadata:
    return PostMetadata(
        slug=post.slug,
        title=post.title,
        date=post.published_at or post.created_at,
        tags=post.tags or [],
        excerpt=post.excerpt,
        author=_author_name(post),
        reading_time=reading_time(post.content),
    )


def to_detail(post: Post) -> PostDetail:
    return PostDetail(
        **to_metadata(post).model_dump(),
        content=render_markdown(post.content),
    )


def list_published(db: Session, limit: Optional[int] = None) -> list[Post]:
    q = db.query(Post).filter(_published()).order_by(_newest_first(), Post.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def get_published(db: Session, slug: str) -> Post:
    post = db.query(Post).filter(Post.slug == slug, _published()).first()
    if not post:
        raise NotFoundError(f"Post not found: {slug}")
    return post


def search_published(db: Session, term: str, limit: Optional[int] = None) -> list[Post]:
    """Case-insensitive substring match on title or content."""
    needle = term.strip().lower()
    q = (
        db.query(Post)
        .filter(
            _published(),
            or_(
                func.lower(Post.title).contains(needle, autoescape=True),
                func.lower(Post.content).contains(needle, autoescape=True),
            ),
        )
        .order_by(_newest_first(), Post.id.desc())
    )
    if limit:
        q = q.limit(limit)
    return q.all()


def published_with_tag(db: Session, tag: str) -> list[Post]:
    """Published posts carrying *tag*, compared case-insensitively."""
    wanted = tag.strip().lower()
    return [p for p in list_published(db) if any(t.lower() == wanted for t in (p.tags or []))]
