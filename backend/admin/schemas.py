# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the admin endpoints."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    role: str = "reader"  # reader / author / admin / super_admin


class ChangeRoleRequest(BaseModel):
    role: str = ""
    reason: Optional[str] = None


# -- Responses -------------------------------------------------------------


class UserRow(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserRow]


# -- Dashboard stats -------------------------------------------------------


class PostStats(CamelModel):
    total: int
    published: int
    drafts: int
    archived: int


class CommentStats(CamelModel):
    total: int
    pending: int
    approved: int
    rejected: int


class RecentPost(CamelModel):
    id: int
    title: str
    slug: str
    status: str
    created_at: datetime


class RecentComment(CamelModel):
    id: str
    post_slug: str
    author_name: str
    content: str  # first 100 characters
    status: str
    created_at: datetime


class StatsResponse(CamelModel):
    success: bool = True
    posts: PostStats
    comments: CommentStats
    recent_posts: List[RecentPost]
    recent_comments: List[RecentComment]


# -- Auth event responses --------------------------------------------------


class AuthEventRow(BaseModel):
    id: int
    user_email: Optional[str] = None        # resolved from user_id join
    event_type: str
    success: bool
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: datetime


class AuthEventListResponse(BaseModel):
    events: List[AuthEventRow]
