# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Comment submission and moderation.

Lifecycle::

    submit ──► pending ──► approved
                   │  ▲        │
                   ▼  └────────┘
                rejected          (any state) ──► deleted (row removed)

Every new comment starts ``pending``; nothing is publicly visible until a
moderator approves it.  Moderation is idempotent: approving an approved
comment simply succeeds again.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import NotFoundError, RateLimitError, ValidationError, format_validation_errors
from core.logger import logger
from core.rate_limit import RateLimiter
from comments.sanitize import is_likely_spam
from comments.schemas import CommentSubmission
from models.comment import COMMENT_STATUSES, Comment
from models.post import Post

SUBMITTED_MESSAGE = "Your comment is awaiting moderation. Thank you!"

_ACTION_STATUS = {"approve": "approved", "reject": "rejected"}
_ACTION_PAST = {"approve": "approved", "reject": "rejected", "delete": "deleted"}


def _validate_submission(db: Session, payload: dict) -> tuple[CommentSubmission, Post, Optional[str]]:
    """
    Field checks first, then the references they point at.  All problems
    found are raised together as one ValidationError.

    Returns the cleaned submission, its post and the effective parent id.
    A reply to a reply is re-attached to the top-level comment so threads
    never go deeper than one level.
    """
    submission = None
    try:
        submission = CommentSubmission.model_validate(payload)
        details: dict[str, str] = {}
    except PydanticValidationError as exc:
        details = format_validation_errors(exc.errors())

    post = None
    if "postSlug" not in details:
        slug = submission.post_slug if submission else str(payload.get("postSlug", "")).strip()
        post = db.query(Post).filter(Post.slug == slug, Post.status == "published").first()
        if post is None:
            details["postSlug"] = "Post not found"

    parent_id = None
    raw_parent = submission.parent_id if submission else None
    if post is not None and raw_parent:
        parent = db.query(Comment).filter(Comment.id == raw_parent).first()
        if parent is None or parent.post_id != post.id:
            details["parentId"] = "Parent comment not found on this post"
        else:
            parent_id = parent.parent_id or parent.id

    if details:
        raise ValidationError("Invalid input", details)
    return submission, post, parent_id


def submit_comment(
    db: Session,
    payload: dict,
    limiter: RateLimiter,
    ip_address: Optional[str] = None,
) -> tuple[Comment, int]:
    """
    Validate, rate-limit on the normalised email, then store the comment as
    ``pending``.  Returns the new row and the submitter's remaining budget.

    A rejected or invalid submission never consumes rate-limit budget.
    """
    submission, post, parent_id = _validate_submission(db, payload)

    decision = limiter.check(submission.author_email)
    if not decision.allowed:
        logger.warning("Comment rate limit hit for %s", submission.author_email)
        raise RateLimitError(
            "Too many comments. Please wait a minute and try again.",
            retry_after=decision.retry_after,
        )

    comment = Comment(
        post_id=post.id,
        parent_id=parent_id,
        author_name=submission.author_name,
        author_email=submission.author_email,
        content=submission.content,
        status="pending",
        ip_address=ip_address,
        spam_suspected=is_likely_spam(submission.content),
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)

    logger.info(
        "Comment %s submitted on %s (spam_suspected=%s)",
        comment.id, post.slug, comment.spam_suspected,
    )
    return comment, decision.remaining


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def approved_for_post(db: Session, post_slug: str) -> list[Comment]:
    """Public thread: approved comments only, oldest first."""
    return (
        db.query(Comment)
        .join(Post, Comment.post_id == Post.id)
        .filter(Post.slug == post_slug, Post.status == "published", Comment.status == "approved")
        .order_by(Comment.created_at.asc())
        .all()
    )


def list_for_moderation(
    db: Session,
    status: Optional[str] = None,
    post_slug: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Comment], int, dict[str, int]]:
    """Newest first.  Returns the page, the filtered total and per-status counts."""
    q = db.query(Comment)
    if status in COMMENT_STATUSES:
        q = q.filter(Comment.status == status)
    if post_slug:
        q = q.join(Post, Comment.post_id == Post.id).filter(Post.slug == post_slug)

    total = q.count()
    rows = q.order_by(Comment.created_at.desc()).offset(offset).limit(limit).all()

    by_status = dict(db.query(Comment.status, func.count(Comment.id)).group_by(Comment.status).all())
    counts = {s: by_status.get(s, 0) for s in COMMENT_STATUSES}
    counts["total"] = sum(by_status.values())
    return rows, total, counts


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------


def _get_or_404(db: Session, comment_id: str) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


def moderate_comment(db: Session, comment_id: str, action: str) -> Comment:
    comment = _get_or_404(db, comment_id)
    comment.status = _ACTION_STATUS[action]
    db.commit()
    logger.info("Comment %s %s", comment_id, _ACTION_PAST[action])
    return comment


def delete_comment(db: Session, comment_id: str) -> None:
    comment = _get_or_404(db, comment_id)
    db.delete(comment)
    db.commit()
    logger.info("Comment %s deleted", comment_id)


def bulk_moderate(db: Session, comment_ids: list[str], action: str) -> int:
    """
    Apply *action* to every id in one transaction.  Unknown ids are ignored;
    the returned count is the number of ids requested.
    """
    q = db.query(Comment).filter(Comment.id.in_(comment_ids))
    if action == "delete":
        q.delete(synchronize_session=False)
    else:
        q.update({Comment.status: _ACTION_STATUS[action]}, synchronize_session=False)
    db.commit()
    logger.info("Bulk %s applied to %d comment(s)", action, len(comment_ids))
    return len(comment_ids)


def bulk_message(action: str, count: int) -> str:
    return f"Successfully {_ACTION_PAST[action]} {count} comment(s)"
