# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class LoginRequest(CamelModel):
    # Presence is checked in the handler so a missing field is a plain 400
    email: str = ""
    password: str = ""
    remember_me: bool = False


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str


# -- Responses -------------------------------------------------------------


class SessionUser(CamelModel):
    id: int
    email: str
    role: str
    display_name: str


class SessionInfo(CamelModel):
    access_token: Optional[str] = None
    expires_at: datetime


class LoginResponse(CamelModel):
    success: bool = True
    user: SessionUser
    session: SessionInfo


class SessionResponse(CamelModel):
    authenticated: bool = True
    user: SessionUser
    session: SessionInfo
