# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, logout, session lookup, password change.

Security notes
--------------
* Login returns the *same* error message whether the email doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* Login attempts are counted per client IP before the credentials are
  looked at, so a locked-out client learns nothing more.
* change-password verifies the old password before accepting the new one,
  so a stolen (but not yet expired) token alone cannot reset the password.
"""

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_db
from core.audit import record_auth_event
from core.config import settings
from core.errors import AuthenticationError, RateLimitError, ValidationError
from core.logger import logger
from core.rate_limit import RateLimiter, get_login_limiter
from core.security import (
    create_access_token,
    decode_access_token,
    extract_token,
    get_client_ip,
    get_current_user,
    get_optional_user,
    hash_password,
    oauth2_scheme,
    validate_new_password,
    verify_password,
)
from models.user import User
from auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    SessionInfo,
    SessionResponse,
    SessionUser,
)

router = APIRouter(prefix="/auth", tags=["auth"])

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid email or password"


def _session_user(user: User) -> SessionUser:
    return SessionUser(id=user.id, email=user.email, role=user.role, display_name=user.display_name)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_login_limiter),
    db: Session = Depends(get_db),
):
    """Authenticate, set the session cookie and return the session."""
    email = body.email.strip().lower()
    if not email or not body.password:
        raise ValidationError("Email and password are required")

    client_ip = get_client_ip(request)
    decision = limiter.check(client_ip)
    if not decision.allowed:
        logger.warning("Login rate limit hit for %s", client_ip)
        record_auth_event(
            db, "failed_login", False, request=request,
            metadata={"email": email, "reason": "rate_limited"},
        )
        raise RateLimitError(
            "Too many login attempts. Please try again later.",
            retry_after=decision.retry_after,
        )

    user = db.query(User).filter(User.email == email).first()

    # Unified failure path – no information leaks about whether the email exists
    if not user or not verify_password(body.password, user.password_hash) or not user.is_active:
        reason = "invalid_credentials" if not user or user.is_active else "account_disabled"
        record_auth_event(
            db, "failed_login", False, user_id=user.id if user else None, request=request,
            metadata={"email": email, "reason": reason},
        )
        raise AuthenticationError(_LOGIN_FAIL, reason="invalid_credentials")

    user.last_login = datetime.now(timezone.utc)
    db.commit()

    lifetime = settings.remember_me_expire_minutes if body.remember_me else settings.access_token_expire_minutes
    token, expires_at = create_access_token(
        {"sub": user.email, "user_id": user.id, "role": user.role},
        expires_delta=timedelta(minutes=lifetime),
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=lifetime * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    record_auth_event(db, "login", True, user_id=user.id, request=request, metadata={"rememberMe": body.remember_me})
    logger.info("User %s logged in", user.email)

    return LoginResponse(
        user=_session_user(user),
        session=SessionInfo(access_token=token, expires_at=expires_at),
    )


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    current_user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Clear the session cookie.  Succeeds even without a session."""
    if current_user is not None:
        record_auth_event(db, "logout", True, user_id=current_user.id, request=request)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True, "message": "Logged out"}


# ---------------------------------------------------------------------------
# GET /auth/session
# ---------------------------------------------------------------------------


def _unauthenticated(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"authenticated": False, "message": message},
    )


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
def session(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    """Describe the caller's session, or 401 when there is none."""
    token = extract_token(request, token)
    if not token:
        return _unauthenticated("No active session")

    try:
        payload = decode_access_token(token)
    except AuthenticationError as exc:
        if exc.reason == "session_expired":
            record_auth_event(db, "session_expired", False, request=request)
        return _unauthenticated(exc.message)

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user or not user.is_active:
        return _unauthenticated("User not found or inactive")

    return SessionResponse(
        user=_session_user(user),
        session=SessionInfo(expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc)),
    )


# ---------------------------------------------------------------------------
# PUT /auth/change-password
# ---------------------------------------------------------------------------


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the authenticated user's login password."""
    if not verify_password(body.old_password, current_user.password_hash):
        raise ValidationError("Old password is incorrect", {"oldPassword": "Old password is incorrect"})

    err = validate_new_password(body.new_password)
    if err:
        raise ValidationError(err, {"newPassword": err})

    current_user.password_hash = hash_password(body.new_password)
    db.commit()
    record_auth_event(db, "password_reset", True, user_id=current_user.id, request=request)

    return {"success": True, "message": "Password changed successfully"}
