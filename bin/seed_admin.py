# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Create the first super admin.

    python bin/seed_admin.py
    python bin/seed_admin.py --email owner@example.org --password '...'

Without options the credentials come from FIRST_ADMIN_EMAIL and
FIRST_ADMIN_PASSWORD in etc/app.conf.  Running it again is harmless.
Every later account is created through POST /api/admin/users.
"""

import sys
import os

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

import click  # noqa: E402

from core.config import settings                                # noqa: E402
from core.logger import logger                                  # noqa: E402
from core.policy import Role                                    # noqa: E402
from core.security import hash_password, validate_new_password  # noqa: E402
from database import SessionLocal                               # noqa: E402
from models.user import User                                    # noqa: E402


def seed(session_factory=SessionLocal, email=None, password=None) -> bool:
    """Return True when a new super admin was inserted."""
    email = (email or settings.first_admin_email).strip().lower()
    password = password or settings.first_admin_password
    if not email or not password:
        logger.warning("No admin credentials given and FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD unset")
        return False

    err = validate_new_password(password)
    if err:
        raise click.ClickException(err)

    db = session_factory()
    try:
        if db.query(User.id).filter(User.email == email).first():
            logger.info("Super admin %s already exists, skipping", email)
            return False

        db.add(User(
            email=email,
            password_hash=hash_password(password),
            full_name="Administrator",
            role=Role.SUPER_ADMIN.value,
            is_active=True,
        ))
        db.commit()
        logger.info("Super admin %s created", email)
        return True
    finally:
        db.close()


@click.command()
@click.option("--email", default=None, help="Defaults to FIRST_ADMIN_EMAIL.")
@click.option("--password", default=None, help="Defaults to FIRST_ADMIN_PASSWORD.")
def main(email, password):
    created = seed(email=email, password=password)
    click.echo("created" if created else "nothing to do")


if __name__ == "__main__":
    main()
