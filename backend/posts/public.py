# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Public, unauthenticated post endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from core.errors import ValidationError
from posts import query
from posts.schemas import PostDetail, PostListPublic, PostSearchResponse

router = APIRouter(prefix="/posts", tags=["public"])


@router.get("", response_model=PostListPublic)
def list_posts(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    posts = [query.to_metadata(p) for p in query.list_published(db, limit)]
    return PostListPublic(posts=posts, count=len(posts))


# Declared before /{slug} so "search" is not taken for a slug
@router.get("/search", response_model=PostSearchResponse)
def search_posts(
    q: str = Query(""),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    if not q.strip():
        raise ValidationError("Search query is required", {"q": "Search query is required"})
    posts = [query.to_metadata(p) for p in query.search_published(db, q, limit)]
    return PostSearchResponse(query=q.strip(), posts=posts, count=len(posts))


@router.get("/{slug}", response_model=PostDetail)
def get_post(slug: str, db: Session = Depends(get_db)):
    return query.to_detail(query.get_published(db, slug))
