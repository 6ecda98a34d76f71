# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Public tag browsing and the super_admin tag manager."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from core.policy import Action
from core.security import require
from models.user import User
from tags import service
from tags.schemas import AdminTagList, RenameTagRequest, TagDetail, TagListResponse

router = APIRouter(prefix="/tags", tags=["public"])
admin_router = APIRouter(prefix="/admin/tags", tags=["tags"])


@router.get("", response_model=TagListResponse)
def list_tags(
    sort: Optional[str] = Query(None, description='"popular" orders by post count'),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    tags = service.published_tag_summaries(db, popular=sort == "popular", limit=limit)
    return TagListResponse(tags=tags, count=len(tags))


@router.get("/{tag}", response_model=TagDetail)
def get_tag(tag: str, db: Session = Depends(get_db)):
    return service.published_tag_detail(db, tag)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=AdminTagList)
def admin_list_tags(
    admin: User = Depends(require(Action.MANAGE_TAGS)),
    db: Session = Depends(get_db),
):
    return AdminTagList(tags=service.admin_tag_rows(db))


@admin_router.put("/{tag_id}")
def rename_tag(
    tag_id: int,
    body: RenameTagRequest,
    admin: User = Depends(require(Action.MANAGE_TAGS)),
    db: Session = Depends(get_db),
):
    tag = service.rename_tag(db, tag_id, body.name)
    return {"success": True, "message": "Tag updated successfully", "tag": tag.model_dump(mode="json")}


@admin_router.delete("/{tag_id}")
def delete_tag(
    tag_id: int,
    admin: User = Depends(require(Action.MANAGE_TAGS)),
    db: Session = Depends(get_db),
):
    service.delete_tag(db, tag_id)
    return {"success": True, "message": "Tag deleted successfully"}
