# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Central security module.  All credential handling and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. Session token creation / decoding        (PyJWT / HS256)
3. FastAPI dependency guards                (get_current_user, require)
4. Client metadata extraction               (IP, user agent)
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthenticationError
from core.policy import Action, authorize
from database import get_db

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.  The salt and round count
    are embedded in the returned passlib string ("$pbkdf2-sha256$...").
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """Constant-time verification against a :func:`hash_password` hash."""
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # Malformed hash in the row – treat as a mismatch
        return False


def validate_new_password(pw: str) -> Optional[str]:
    """
    Return an error string if the password does not meet the minimum policy,
    or None if it is acceptable.

    Policy: >= 8 chars, at least one uppercase, one lowercase, one digit.
    """
    if len(pw) < 8:
        return "Password must be at least 8 characters"
    if not re.search(r"[A-Z]", pw):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", pw):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[0-9]", pw):
        return "Password must contain at least one digit"
    return None


# ---------------------------------------------------------------------------
# 2.  JWT – session tokens
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub (email), user_id, role.  An ``exp``
    claim is added automatically.  Returns the token and its expiry.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    return _jwt.encode(to_encode, settings.secret_key, algorithm="HS256"), expire


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises AuthenticationError on any failure
    (expired, bad signature, malformed).
    """
    try:
        return _jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except _jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired", reason="session_expired")
    except _jwt.InvalidTokenError:
        raise AuthenticationError("Invalid session token", reason="invalid_token")


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs.
# auto_error is off because browsers send the token as a cookie instead.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header first, then the HttpOnly session cookie."""
    return bearer or request.cookies.get(settings.session_cookie_name)


def _load_user(payload: dict, db: Session):
    # Lazy import to avoid circular dependency at module load time
    from models.user import User  # noqa: E402

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive", reason="invalid_user")
    return user


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    """
    Dependency: decode the session token, load the User row, verify the
    account is active.  Returns the User ORM instance.

    Raises 401 if there is no token, it is invalid, or the user is gone.
    """
    token = extract_token(request, token)
    if not token:
        raise AuthenticationError()
    return _load_user(decode_access_token(token), db)


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    """Like :func:`get_current_user` but returns None instead of raising."""
    token = extract_token(request, token)
    if not token:
        return None
    try:
        return _load_user(decode_access_token(token), db)
    except AuthenticationError:
        return None


def require(action: Action):
    """
    Dependency factory: resolves the current user and runs the policy check
    for *action*.  Ownership checks need the target row and are done by the
    handler with a second :func:`authorize` call.
    """

    def _guard(current_user=Depends(get_current_user)):
        return authorize(current_user, action)

    return _guard


# ---------------------------------------------------------------------------
# 4.  Client metadata
# ---------------------------------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    IPv4-mapped IPv6 addresses (::ffff:1.2.3.4) are reduced to the IPv4 form.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        ip = forwarded.split(",")[0].strip()
    elif request.client:
        ip = request.client.host
    else:
        return "unknown"

    if ip.startswith("::ffff:"):
        ip = ip[7:]
    return ip


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent")
