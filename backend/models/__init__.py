# Import every model so Base.metadata knows about all tables.
from models.user import User  # noqa: F401
from models.role_change import UserRoleChange  # noqa: F401
from models.auth_event import AuthEvent  # noqa: F401
from models.post import Post, Tag, post_tags  # noqa: F401
from models.comment import Comment  # noqa: F401
from models.rate_limit import RateLimitBucket  # noqa: F401
