# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""UserRoleChange ORM model – append-only history of role assignments."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class UserRoleChange(Base):
    __tablename__ = "user_role_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # The user whose role changed
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_role = Column(String(32), nullable=False)
    new_role = Column(String(32), nullable=False)
    # The super admin who made the change
    changed_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason = Column(Text, nullable=True)
    changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
