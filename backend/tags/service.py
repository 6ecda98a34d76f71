# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Tags.

The public views are derived from the ``tags`` lists of *published* posts,
so a tag only shows up once something public carries it.  The admin side
works on the ``tags`` table, whose post counts include every status.
"""

from collections import Counter
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, ValidationError
from core.logger import logger
from models.post import Post, Tag, post_tags
from posts import query
from posts.content import normalize_tag_slug
from tags.schemas import AdminTagRow, TagDetail, TagSummary


def _display(name: str) -> str:
    return name[:1].upper() + name[1:]


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def published_tag_summaries(db: Session, popular: bool = False, limit: Optional[int] = None) -> list[TagSummary]:
    """Alphabetical, or by descending post count when *popular*."""
    counts: Counter = Counter()
    for post in query.list_published(db):
        # A post counts once per tag even if it lists it twice
        for name in {t.lower() for t in (post.tags or [])}:
            counts[name] += 1

    summaries = [
        TagSummary(name=name, display_name=_display(name), post_count=n)
        for name, n in sorted(counts.items())
    ]
    if popular:
        summaries.sort(key=lambda s: s.post_count, reverse=True)
    if limit:
        summaries = summaries[:limit]
    return summaries


def published_tag_detail(db: Session, tag: str) -> TagDetail:
    name = tag.strip().lower()
    posts = query.published_with_tag(db, name)
    if not posts:
        raise NotFoundError(f"Tag not found: {tag}")
    return TagDetail(
        name=name,
        display_name=_display(name),
        post_count=len(posts),
        posts=[query.to_metadata(p) for p in posts],
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


def _post_count(db: Session, tag_id: int) -> int:
    return db.query(func.count()).select_from(post_tags).filter(post_tags.c.tag_id == tag_id).scalar()


def _get_or_404(db: Session, tag_id: int) -> Tag:
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise NotFoundError("Tag not found")
    return tag


def admin_tag_rows(db: Session) -> list[AdminTagRow]:
    rows = (
        db.query(Tag, func.count(post_tags.c.post_id))
        .outerjoin(post_tags, post_tags.c.tag_id == Tag.id)
        .group_by(Tag.id)
        .order_by(Tag.name)
        .all()
    )
    return [
        AdminTagRow(id=t.id, name=t.name, slug=t.slug, post_count=n, created_at=t.created_at)
        for t, n in rows
    ]


def rename_tag(db: Session, tag_id: int, name: str) -> AdminTagRow:
    """
    Rename and re-derive the slug.  Posts carrying the tag get the new
    display name in their own ``tags`` list in the same commit.
    """
    tag = _get_or_404(db, tag_id)
    name = (name or "").strip()
    slug = normalize_tag_slug(name)
    if not slug:
        raise ValidationError("Tag name required", {"name": "Tag name required"})

    clash = db.query(Tag.id).filter(Tag.slug == slug, Tag.id != tag.id).first()
    if clash:
        raise ConflictError("A tag with this name already exists")

    old_slug = tag.slug
    for post in tag.posts:
        post.tags = [name if normalize_tag_slug(t) == old_slug else t for t in (post.tags or [])]

    tag.name = name
    tag.slug = slug
    db.commit()
    logger.info("Tag %s renamed to %s", old_slug, slug)
    return AdminTagRow(id=tag.id, name=tag.name, slug=tag.slug, post_count=_post_count(db, tag.id), created_at=tag.created_at)


def delete_tag(db: Session, tag_id: int) -> None:
    """Only unused tags may go."""
    tag = _get_or_404(db, tag_id)
    count = _post_count(db, tag.id)
    if count > 0:
        raise ValidationError(f"Cannot delete tag. It is used by {count} post(s).")
    slug = tag.slug
    db.delete(tag)
    db.commit()
    logger.info("Tag %s deleted", slug)
