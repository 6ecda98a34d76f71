# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – user management, dashboard stats, auth event trail.

Every endpoint in this router needs the super_admin role.  A request that
carries a valid session for any lower role receives 403 before any business
logic runs.
"""

import io
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy import func
from sqlalchemy.orm import Session
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from database import get_db
from core.errors import ConflictError, NotFoundError, ValidationError
from core.logger import logger
from core.policy import VALID_ROLES, Action, ensure_not_self
from core.security import hash_password, require, validate_new_password
from models.auth_event import EVENT_TYPES, AuthEvent
from models.comment import Comment
from models.post import Post
from models.role_change import UserRoleChange
from models.user import User
from admin.schemas import (
    AuthEventListResponse,
    AuthEventRow,
    ChangeRoleRequest,
    CommentStats,
    CreateUserRequest,
    PostStats,
    RecentComment,
    RecentPost,
    StatsResponse,
    UserListResponse,
    UserRow,
)

router = APIRouter(prefix="/admin", tags=["admin"])

_INVALID_ROLE = "Invalid role. Must be one of: " + ", ".join(sorted(VALID_ROLES))


# ---------------------------------------------------------------------------
# POST /admin/users  – create a new user
# ---------------------------------------------------------------------------


@router.post("/users", response_model=UserRow, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """Create an account with an initial password and role."""
    if body.role not in VALID_ROLES:
        raise ValidationError(_INVALID_ROLE, {"role": _INVALID_ROLE})

    err = validate_new_password(body.password)
    if err:
        raise ValidationError(err, {"password": err})

    email = body.email.lower()
    # Uniqueness check
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already exists")

    user = User(
        email=email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        role=body.role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s created by %s with role %s", user.email, admin.email, user.role)
    return user


# ---------------------------------------------------------------------------
# GET /admin/users  – list users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=UserListResponse)
def list_users(
    search: Optional[str] = Query(None, description="Substring of the email address"),
    role: Optional[str] = Query(None, description="Exact role, or 'all'"),
    admin: User = Depends(require(Action.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """Newest accounts first.  No password data – handled by the schema."""
    q = db.query(User)
    if search:
        q = q.filter(func.lower(User.email).contains(search.strip().lower(), autoescape=True))
    if role and role != "all":
        q = q.filter(User.role == role)
    users = q.order_by(User.created_at.desc(), User.id.desc()).all()
    return UserListResponse(users=users)


# ---------------------------------------------------------------------------
# PUT /admin/users/{id}/role  – promote or demote a user
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/role")
def change_role(
    user_id: int,
    body: ChangeRoleRequest,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Change the role of an existing user.  Guards:
    * Role value must be one of the four known roles.
    * Nobody can change their own role (prevents accidental self-lockout).

    The role update and its history row are committed together.
    """
    if not body.role:
        raise ValidationError("Role is required", {"role": "Role is required"})
    if body.role not in VALID_ROLES:
        raise ValidationError(_INVALID_ROLE, {"role": _INVALID_ROLE})

    ensure_not_self(admin, user_id)

    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise NotFoundError("User not found")

    old_role = target.role
    target.role = body.role
    db.add(UserRoleChange(
        user_id=target.id,
        old_role=old_role,
        new_role=body.role,
        changed_by=admin.id,
        reason=body.reason or f"Role changed from {old_role} to {body.role} by super admin",
    ))
    db.commit()
    logger.info("Role of %s changed from %s to %s by %s", target.email, old_role, body.role, admin.email)

    return {"success": True, "message": f"User role updated from {old_role} to {body.role}"}


# ---------------------------------------------------------------------------
# GET /admin/stats  – dashboard numbers
# ---------------------------------------------------------------------------


def _count_by_status(db: Session, column) -> dict[str, int]:
    return dict(db.query(column, func.count()).group_by(column).all())


@router.get("/stats", response_model=StatsResponse)
def stats(
    admin: User = Depends(require(Action.VIEW_STATS)),
    db: Session = Depends(get_db),
):
    posts = _count_by_status(db, Post.status)
    comments = _count_by_status(db, Comment.status)

    recent_posts = db.query(Post).order_by(Post.created_at.desc(), Post.id.desc()).limit(5).all()
    recent_comments = db.query(Comment).order_by(Comment.created_at.desc()).limit(10).all()

    return StatsResponse(
        posts=PostStats(
            total=sum(posts.values()),
            published=posts.get("published", 0),
            drafts=posts.get("draft", 0),
            archived=posts.get("archived", 0),
        ),
        comments=CommentStats(
            total=sum(comments.values()),
            pending=comments.get("pending", 0),
            approved=comments.get("approved", 0),
            rejected=comments.get("rejected", 0),
        ),
        recent_posts=[
            RecentPost(id=p.id, title=p.title, slug=p.slug, status=p.status, created_at=p.created_at)
            for p in recent_posts
        ],
        recent_comments=[
            RecentComment(
                id=c.id,
                post_slug=c.post_slug,
                author_name=c.author_name,
                content=c.content[:100] + ("..." if len(c.content) > 100 else ""),
                status=c.status,
                created_at=c.created_at,
            )
            for c in recent_comments
        ],
    )


# ---------------------------------------------------------------------------
# GET /admin/auth-events  – authentication trail with optional filters
# ---------------------------------------------------------------------------


def _auth_event_query(db: Session, emails=None, event_type=None, since=None, until=None):
    q = db.query(AuthEvent, User.email).outerjoin(User, AuthEvent.user_id == User.id)
    if emails:
        q = q.filter(User.email.in_(emails))
    if event_type:
        q = q.filter(AuthEvent.event_type == event_type)
    if since:
        q = q.filter(AuthEvent.created_at >= since)
    if until:
        q = q.filter(AuthEvent.created_at <= until)
    return q.order_by(AuthEvent.created_at.desc(), AuthEvent.id.desc())


@router.get("/auth-events", response_model=AuthEventListResponse)
def list_auth_events(
    emails: list[str] | None = Query(None, description="Filter by exact email(s) – repeated param"),
    event_type: str | None = Query(None, description="One of: " + ", ".join(EVENT_TYPES)),
    since: datetime | None = Query(None, description="ISO-8601 start of time window"),
    until: datetime | None = Query(None, description="ISO-8601 end of time window"),
    limit: int = Query(200, ge=1, le=1000),
    admin: User = Depends(require(Action.VIEW_AUTH_EVENTS)),
    db: Session = Depends(get_db),
):
    """
    Return auth events newest-first.  Supports optional filters:

    * ``emails`` – one or more exact email addresses of the acting user.
    * ``event_type`` – login, failed_login, logout, ...
    * ``since`` / ``until`` – ISO-8601 bounds on ``created_at``.
    * ``limit`` – max rows returned (default 200, cap 1000).
    """
    rows = _auth_event_query(db, emails, event_type, since, until).limit(limit).all()
    return AuthEventListResponse(events=[
        AuthEventRow(
            id=event.id,
            user_email=email,
            event_type=event.event_type,
            success=event.success,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
            metadata=event.event_metadata,
            created_at=event.created_at,
        )
        for event, email in rows
    ])


# ---------------------------------------------------------------------------
# GET /admin/auth-events/export  – download auth events as Excel
# ---------------------------------------------------------------------------

_AUDIT_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_AUDIT_HEADER_FILL  = PatternFill(start_color="6C63FF", end_color="6C63FF", fill_type="solid")
_AUDIT_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_AUDIT_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_AUDIT_EXPORT_HEADERS = ["ID", "Time", "User", "Event", "Success", "IP Address", "User Agent", "Details"]
_AUDIT_COL_MIN = [8, 20, 28, 18, 10, 16, 40, 50]


def _format_metadata(metadata) -> str:
    if not metadata:
        return ""
    return ", ".join(f"{k}={v}" for k, v in sorted(metadata.items()))


@router.get("/auth-events/export")
def export_auth_events(
    admin: User = Depends(require(Action.VIEW_AUTH_EVENTS)),
    db: Session = Depends(get_db),
):
    """Export every auth event as an Excel file."""
    rows = _auth_event_query(db).all()

    wb = Workbook()
    ws = wb.active
    ws.title = "Auth Events"

    # Header row
    ws.append(_AUDIT_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _AUDIT_HEADER_FONT
        cell.fill = _AUDIT_HEADER_FILL
        cell.alignment = _AUDIT_HEADER_ALIGN
        cell.border = _AUDIT_THIN_BORDER

    # Data rows
    for event, email in rows:
        ws.append([
            event.id,
            event.created_at.strftime("%Y-%m-%d %H:%M:%S") if event.created_at else "",
            email or "",
            event.event_type,
            "yes" if event.success else "no",
            event.ip_address or "",
            event.user_agent or "",
            _format_metadata(event.event_metadata),
        ])
        # Apply border to every cell
        row_idx = ws.max_row
        for col_idx in range(1, len(_AUDIT_EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _AUDIT_THIN_BORDER

    # Column widths
    for col_idx, min_w in enumerate(_AUDIT_COL_MIN, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = min_w

    # Stream
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="auth-events.xlsx"'},
    )
