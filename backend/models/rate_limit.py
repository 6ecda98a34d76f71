# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""RateLimitBucket ORM model – shared fixed-window counters."""

from sqlalchemy import Column, Integer, String, DateTime

from database import Base


class RateLimitBucket(Base):
    __tablename__ = "rate_limit_buckets"

    key = Column(String(320), primary_key=True)   # "<scope>:<identity>"
    count = Column(Integer, nullable=False, default=0)
    # Naive UTC – compared against datetime.utcnow()-style values
    reset_at = Column(DateTime(timezone=False), nullable=False)
