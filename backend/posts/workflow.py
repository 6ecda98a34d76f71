# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Post publication workflow.

Statuses are ``draft``, ``published`` and ``archived``; any status may be
set from any other.  The only side effect lives on publication: the first
time a post becomes ``published`` its ``published_at`` is stamped, and no
later transition touches it again.  Un-publishing and re-publishing keeps
the original date so chronological listings stay stable.

Each operation here ends in exactly one commit.  The duplicate-slug
pre-check is backed by the unique constraint on ``posts.slug``; a race that
slips past the pre-check surfaces as the same 409.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core import clock
from core.errors import ConflictError, NotFoundError, ValidationError
from core.logger import logger
from models.post import POST_STATUSES, Post, Tag
from posts.content import dedupe_tags, generate_excerpt, is_valid_slug, normalize_tag_slug

_REQUIRED_FIELDS = ("title", "slug", "content")

_SLUG_MESSAGE = "Invalid slug format. Use lowercase letters, numbers, and hyphens only."
_DUPLICATE_MESSAGE = "A post with this slug already exists"


def get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise NotFoundError("Post not found")
    return post


def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Post.id).filter(Post.slug == slug)
    if exclude_id is not None:
        q = q.filter(Post.id != exclude_id)
    return q.first() is not None


def _validate(data: dict, creating: bool) -> None:
    """Collect every field problem before raising, so the client sees all."""
    details: dict[str, str] = {}

    for name in _REQUIRED_FIELDS:
        if name not in data and not creating:
            continue
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            details[name] = f"{name.capitalize()} is required"

    slug = data.get("slug")
    if "slug" not in details and slug is not None and not is_valid_slug(slug):
        details["slug"] = _SLUG_MESSAGE

    status = data.get("status")
    if status is not None and status not in POST_STATUSES:
        details["status"] = f"Status must be one of: {', '.join(POST_STATUSES)}"

    if not details:
        return
    if creating and any(details.get(f, "").endswith("is required") for f in _REQUIRED_FIELDS):
        message = "Missing required fields: title, slug, content"
    elif "slug" in details and len(details) == 1:
        message = _SLUG_MESSAGE
    else:
        message = "Invalid input"
    raise ValidationError(message, details)


def apply_status(post: Post, status: str) -> None:
    """Set *status*; stamp ``published_at`` on the first publication only."""
    post.status = status
    if status == "published" and post.published_at is None:
        post.published_at = clock.utc_now()


def sync_tags(db: Session, post: Post, names) -> None:
    """
    Store the de-duplicated display names on the post and mirror them into
    ``tags`` / ``post_tags``.  Tags are matched on their normalised slug, so
    "Python" and "python" share one row.
    """
    names = dedupe_tags(names)
    rows = []
    for name in names:
        slug = normalize_tag_slug(name)
        tag = db.query(Tag).filter(Tag.slug == slug).first()
        if tag is None:
            tag = Tag(name=name, slug=slug)
            db.add(tag)
        rows.append(tag)
    post.tags = names
    post.tag_rows = rows


def _commit(db: Session, post: Post) -> Post:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(_DUPLICATE_MESSAGE)
    db.refresh(post)
    return post


def create_post(db: Session, author, data: dict) -> Post:
    _validate(data, creating=True)

    slug = data["slug"]
    if _slug_taken(db, slug):
        raise ConflictError(_DUPLICATE_MESSAGE)

    content = data["content"]
    post = Post(
        title=data["title"].strip(),
        slug=slug,
        content=content,
        excerpt=data.get("excerpt") or generate_excerpt(content),
        author_id=author.id if author is not None else None,
        published_at=data.get("published_at"),
    )
    apply_status(post, data.get("status") or "draft")
    db.add(post)
    sync_tags(db, post, data.get("tags") or [])

    post = _commit(db, post)
    logger.info("Post %s created (status=%s)", post.slug, post.status)
    return post


def update_post(db: Session, post: Post, data: dict) -> Post:
    """Partial update: only keys present in *data* are changed."""
    _validate(data, creating=False)

    if "slug" in data and data["slug"] != post.slug:
        if _slug_taken(db, data["slug"], exclude_id=post.id):
            raise ConflictError(_DUPLICATE_MESSAGE)
        post.slug = data["slug"]

    if "title" in data:
        post.title = data["title"].strip()
    if "content" in data:
        post.content = data["content"]
    if "excerpt" in data:
        post.excerpt = data["excerpt"]
    if "tags" in data:
        sync_tags(db, post, data["tags"] or [])
    if data.get("status") is not None:
        apply_status(post, data["status"])

    post = _commit(db, post)
    logger.info("Post %s updated (status=%s)", post.slug, post.status)
    return post


def delete_post(db: Session, post: Post) -> None:
    """Hard delete; comments and tag links go with it."""
    slug = post.slug
    db.delete(post)
    db.commit()
    logger.info("Post %s deleted", slug)
