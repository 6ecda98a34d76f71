# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the tag endpoints."""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from core.schemas import CamelModel
from posts.schemas import PostMetadata


class RenameTagRequest(BaseModel):
    name: str = ""


class AdminTagRow(BaseModel):
    id: int
    name: str
    slug: str
    post_count: int
    created_at: datetime


class AdminTagList(BaseModel):
    success: bool = True
    tags: List[AdminTagRow]


class TagSummary(CamelModel):
    name: str          # lower-cased tag as written on posts
    display_name: str
    post_count: int


class TagDetail(TagSummary):
    posts: List[PostMetadata]


class TagListResponse(BaseModel):
    tags: List[TagSummary]
    count: int
