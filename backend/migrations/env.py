# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Alembic environment for the microblog schema.

Run from the project root (``alembic upgrade head``); alembic.ini puts
``backend/`` on sys.path.  Migrations reuse the application's engine, so
the connection string and the SQLite foreign-key pragma come from
``database.py`` and etc/app.conf.
"""

from alembic import context

from core.config import settings
from core.logger import logger
from database import Base, engine

# Registers users, posts, tags, comments, rate_limit_buckets, auth_events and
# user_role_changes on Base.metadata for --autogenerate.
import models  # noqa: F401, E402

_SQLITE = engine.dialect.name == "sqlite"


def _configure(**kwargs):
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=_SQLITE,
        **kwargs,
    )


def run_migrations_online():
    with engine.connect() as conn:
        _configure(connection=conn)
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_offline():
    """Emit SQL to stdout instead of touching a database."""
    _configure(url=settings.database_url, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


logger.info("Running migrations against %s (%s mode)",
            engine.url.render_as_string(hide_password=True),
            "offline" if context.is_offline_mode() else "online")

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
