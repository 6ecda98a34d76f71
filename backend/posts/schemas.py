# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the post endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class PostWriteRequest(BaseModel):
    """
    Body of both create and update.  Every field is optional here: create
    checks for the required ones itself so all problems are reported
    together, and update only touches the fields that were sent.
    """

    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[str] = None


# -- Admin responses -------------------------------------------------------


class PostAuthor(BaseModel):
    id: int
    full_name: Optional[str] = None
    email: str

    model_config = {"from_attributes": True}


class PostSummaryRow(BaseModel):
    id: int
    slug: str
    title: str
    excerpt: Optional[str] = None
    tags: List[str] = []
    status: str
    author_id: Optional[int] = None
    author: Optional[PostAuthor] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostRow(PostSummaryRow):
    content: str


class PostCounts(BaseModel):
    total: int
    draft: int
    published: int
    archived: int


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class PostListResponse(BaseModel):
    success: bool = True
    posts: List[PostSummaryRow]
    counts: PostCounts
    pagination: Pagination


class PostResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    post: PostRow


# -- Public responses ------------------------------------------------------


class PostMetadata(CamelModel):
    slug: str
    title: str
    date: datetime
    tags: List[str]
    excerpt: Optional[str] = None
    author: str
    reading_time: int


class PostDetail(PostMetadata):
    content: str  # rendered HTML


class PostListPublic(CamelModel):
    posts: List[PostMetadata]
    count: int


class PostSearchResponse(CamelModel):
    query: str
    posts: List[PostMetadata]
    count: int
