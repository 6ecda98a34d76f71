# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Comment endpoints.

``router``        – public submission and the approved thread of a post.
``admin_router``  – the moderation queue; super_admin only.  Author email
                    and IP address are only ever exposed here.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core.policy import Action
from core.rate_limit import RateLimiter, get_comment_limiter
from core.security import get_client_ip, require
from comments import workflow
from comments.schemas import (
    AdminComment,
    AdminCommentList,
    BulkModerateRequest,
    CommentCounts,
    ModerateRequest,
    PublicComment,
    PublicCommentList,
    SubmitResponse,
)
from models.user import User

router = APIRouter(prefix="/comments", tags=["comments"])
admin_router = APIRouter(prefix="/admin/comments", tags=["comments"])


# ---------------------------------------------------------------------------
# POST /comments  – public submission
# ---------------------------------------------------------------------------


@router.post("", response_model=SubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_comment(
    request: Request,
    payload: dict[str, Any] = Body(...),
    limiter: RateLimiter = Depends(get_comment_limiter),
    db: Session = Depends(get_db),
):
    """
    The body is taken as a raw object so field checks and the post / parent
    lookups can report their errors together.
    """
    comment, remaining = workflow.submit_comment(db, payload, limiter, ip_address=get_client_ip(request))
    return SubmitResponse(
        message=workflow.SUBMITTED_MESSAGE,
        comment_id=comment.id,
        remaining=remaining,
    )


# ---------------------------------------------------------------------------
# GET /comments/{postSlug}  – approved thread
# ---------------------------------------------------------------------------


@router.get("/{post_slug}", response_model=PublicCommentList)
def list_post_comments(post_slug: str, db: Session = Depends(get_db)):
    comments = [PublicComment.model_validate(c) for c in workflow.approved_for_post(db, post_slug)]
    return PublicCommentList(comments=comments, count=len(comments))


# ---------------------------------------------------------------------------
# Moderation queue
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=AdminCommentList)
def list_comments(
    status_filter: Optional[str] = Query(None, alias="status"),
    post_slug: Optional[str] = Query(None, alias="postSlug"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require(Action.MODERATE_COMMENTS)),
    db: Session = Depends(get_db),
):
    rows, total, counts = workflow.list_for_moderation(db, status_filter, post_slug, limit, offset)
    return AdminCommentList(
        comments=[AdminComment.model_validate(c) for c in rows],
        total=total,
        counts=CommentCounts(**counts),
    )


# Declared before /{comment_id} so "bulk" is not taken for an id
@admin_router.post("/bulk")
def bulk_moderate(
    body: BulkModerateRequest,
    admin: User = Depends(require(Action.MODERATE_COMMENTS)),
    db: Session = Depends(get_db),
):
    """Up to 50 ids.  The whole body is validated before anything changes."""
    count = workflow.bulk_moderate(db, body.comment_ids, body.action)
    return {
        "success": True,
        "message": workflow.bulk_message(body.action, count),
        "count": count,
    }


@admin_router.put("/{comment_id}")
def moderate_comment(
    comment_id: str,
    body: ModerateRequest,
    admin: User = Depends(require(Action.MODERATE_COMMENTS)),
    db: Session = Depends(get_db),
):
    comment = workflow.moderate_comment(db, comment_id, body.action)
    return {"success": True, "message": f"Comment {comment.status}"}


@admin_router.delete("/{comment_id}")
def delete_comment(
    comment_id: str,
    admin: User = Depends(require(Action.MODERATE_COMMENTS)),
    db: Session = Depends(get_db),
):
    workflow.delete_comment(db, comment_id)
    return {"success": True, "message": "Comment deleted"}
