# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Authentication event trail.

Events are best effort: they are written in their own commit *after* the
operation they describe, and a failing insert is rolled back and logged as
a warning.  A broken audit table never fails a login.
"""

from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logger import logger
from core.security import get_client_ip, get_user_agent
from models.auth_event import AuthEvent


def record_auth_event(
    db: Session,
    event_type: str,
    success: bool,
    user_id: Optional[int] = None,
    request: Optional[Request] = None,
    metadata: Optional[dict] = None,
) -> None:
    event = AuthEvent(
        user_id=user_id,
        event_type=event_type,
        success=success,
        ip_address=get_client_ip(request) if request is not None else None,
        user_agent=get_user_agent(request) if request is not None else None,
        event_metadata=metadata or None,
    )
    try:
        db.add(event)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Failed to record auth event %s: %s", event_type, exc)
