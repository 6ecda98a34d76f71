# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Admin post endpoints.

Authors (and above) may create posts and see / edit their own.  Admins and
super admins see and edit everything.  Deleting needs the admin role
regardless of who wrote the post.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from core.policy import Action, Role, authorize, has_role
from core.security import require
from models.post import POST_STATUSES, Post
from models.user import User
from posts import workflow
from posts.schemas import (
    Pagination,
    PostCounts,
    PostListResponse,
    PostResponse,
    PostWriteRequest,
)

router = APIRouter(prefix="/admin/posts", tags=["posts"])


def _own_posts_only(user: User) -> bool:
    return not has_role(user.role, Role.ADMIN)


# ---------------------------------------------------------------------------
# GET /admin/posts
# ---------------------------------------------------------------------------


@router.get("", response_model=PostListResponse)
def list_posts(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require(Action.READ_POST)),
    db: Session = Depends(get_db),
):
    """Newest first.  Authors only ever see their own rows."""
    base = db.query(Post)
    if _own_posts_only(current_user):
        base = base.filter(Post.author_id == current_user.id)

    q = base
    if status_filter in POST_STATUSES:
        q = q.filter(Post.status == status_filter)

    total = q.count()
    posts = q.order_by(Post.created_at.desc(), Post.id.desc()).offset(offset).limit(limit).all()

    by_status = dict(
        base.with_entities(Post.status, func.count(Post.id)).group_by(Post.status).all()
    )
    counts = PostCounts(
        total=sum(by_status.values()),
        draft=by_status.get("draft", 0),
        published=by_status.get("published", 0),
        archived=by_status.get("archived", 0),
    )
    return PostListResponse(
        posts=posts,
        counts=counts,
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


# ---------------------------------------------------------------------------
# POST /admin/posts
# ---------------------------------------------------------------------------


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostWriteRequest,
    current_user: User = Depends(require(Action.CREATE_POST)),
    db: Session = Depends(get_db),
):
    post = workflow.create_post(db, current_user, body.model_dump())
    return PostResponse(message="Post created successfully", post=post)


# ---------------------------------------------------------------------------
# GET / PUT / DELETE /admin/posts/{id}
# ---------------------------------------------------------------------------


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    current_user: User = Depends(require(Action.READ_POST)),
    db: Session = Depends(get_db),
):
    post = workflow.get_post_or_404(db, post_id)
    authorize(current_user, Action.READ_POST, owner_id=post.author_id, check_owner=True)
    return PostResponse(post=post)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    body: PostWriteRequest,
    current_user: User = Depends(require(Action.UPDATE_POST)),
    db: Session = Depends(get_db),
):
    """Partial update – fields missing from the body are left alone."""
    post = workflow.get_post_or_404(db, post_id)
    authorize(current_user, Action.UPDATE_POST, owner_id=post.author_id, check_owner=True)
    post = workflow.update_post(db, post, body.model_dump(exclude_unset=True))
    return PostResponse(message="Post updated successfully", post=post)


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    current_user: User = Depends(require(Action.DELETE_POST)),
    db: Session = Depends(get_db),
):
    post = workflow.get_post_or_404(db, post_id)
    workflow.delete_post(db, post)
    return {"success": True, "message": "Post deleted successfully"}
