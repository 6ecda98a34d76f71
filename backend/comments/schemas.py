# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the comment endpoints."""

import uuid
from datetime import datetime
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from core.schemas import CamelModel, FormModel
from comments.sanitize import sanitize_comment_content
from posts.content import is_valid_slug

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 2000
BULK_MAX = 50

MODERATION_ACTIONS = ("approve", "reject")
BULK_ACTIONS = ("approve", "reject", "delete")


def _error(kind: str, message: str) -> PydanticCustomError:
    # Custom errors keep the message verbatim (no "Value error, " prefix)
    return PydanticCustomError(kind, message)


# -- Requests --------------------------------------------------------------


class CommentSubmission(FormModel):
    """
    Public comment form.  Missing fields default to "" and are still run
    through their validator, so every problem is reported in one response.
    """

    post_slug: str = Field("", validate_default=True)
    author_name: str = Field("", validate_default=True)
    author_email: str = Field("", validate_default=True)
    content: str = Field("", validate_default=True)
    parent_id: Optional[str] = None

    @field_validator("post_slug")
    @classmethod
    def _check_slug(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise _error("required", "Post slug is required")
        if not is_valid_slug(v):
            raise _error("slug_format", "Invalid post slug format")
        return v

    @field_validator("author_name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise _error("required", "Name is required")
        if len(v) < NAME_MIN_LENGTH:
            raise _error("too_short", f"Name must be at least {NAME_MIN_LENGTH} characters")
        if len(v) > NAME_MAX_LENGTH:
            raise _error("too_long", f"Name must not exceed {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("author_email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise _error("required", "Email is required")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise _error("email", "Please enter a valid email address")
        return v.lower()

    @field_validator("content")
    @classmethod
    def _check_content(cls, v: str) -> str:
        # Length limits apply to what will actually be stored
        v = sanitize_comment_content(v)
        if not v:
            raise _error("required", "Comment is required")
        if len(v) < CONTENT_MIN_LENGTH:
            raise _error("too_short", f"Comment must be at least {CONTENT_MIN_LENGTH} characters")
        if len(v) > CONTENT_MAX_LENGTH:
            raise _error("too_long", f"Comment must not exceed {CONTENT_MAX_LENGTH} characters")
        return v

    @field_validator("parent_id")
    @classmethod
    def _check_parent(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        try:
            return str(uuid.UUID(v.strip()))
        except ValueError:
            raise _error("uuid", "Invalid parent comment ID")


class ModerateRequest(BaseModel):
    action: str

    @field_validator("action")
    @classmethod
    def _check_action(cls, v: str) -> str:
        if v not in MODERATION_ACTIONS:
            raise _error("action", "Action must be approve or reject")
        return v


class BulkModerateRequest(FormModel):
    comment_ids: List[str] = Field(default_factory=list, validate_default=True)
    action: str = Field("", validate_default=True)

    @field_validator("comment_ids")
    @classmethod
    def _check_ids(cls, v: List[str]) -> List[str]:
        if not v:
            raise _error("required", "commentIds must be a non-empty array")
        if len(v) > BULK_MAX:
            raise _error("too_many", f"Cannot moderate more than {BULK_MAX} comments at once")
        return v

    @field_validator("action")
    @classmethod
    def _check_action(cls, v: str) -> str:
        if v not in BULK_ACTIONS:
            raise _error("action", "Action must be approve, reject, or delete")
        return v


# -- Responses -------------------------------------------------------------


class SubmitResponse(CamelModel):
    success: bool = True
    message: str
    comment_id: str
    remaining: int


class PublicComment(CamelModel):
    id: str
    author_name: str
    content: str
    created_at: datetime
    parent_id: Optional[str] = None


class PublicCommentList(CamelModel):
    success: bool = True
    comments: List[PublicComment]
    count: int


class AdminComment(CamelModel):
    id: str
    post_slug: str
    parent_id: Optional[str] = None
    author_name: str
    author_email: str
    content: str
    status: str
    ip_address: Optional[str] = None
    spam_suspected: bool
    created_at: datetime


class CommentCounts(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class AdminCommentList(CamelModel):
    success: bool = True
    comments: List[AdminComment]
    total: int
    counts: CommentCounts
