# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""AuthEvent ORM model – append-only trail of authentication activity."""

from sqlalchemy import Column, Integer, String, Text, Boolean, JSON, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base

EVENT_TYPES = (
    "login",
    "logout",
    "failed_login",
    "magic_link_sent",
    "magic_link_used",
    "session_expired",
    "password_reset",
)


class AuthEvent(Base):
    __tablename__ = "auth_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # NULL for failed attempts whose identity is unknown
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    event_type = Column(String(32), nullable=False, index=True)
    success = Column(Boolean, nullable=False, default=False)
    ip_address = Column(String(45), nullable=True)            # supports IPv6
    user_agent = Column(Text, nullable=True)
    # ``metadata`` is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
