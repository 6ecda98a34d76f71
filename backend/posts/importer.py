# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Bulk import of markdown files with front matter (``bin/import_posts.py``).

Each ``<slug>.md`` becomes a published post whose ``published_at`` is the
front-matter date.  Drafts and slugs that already exist are skipped, so the
import can be re-run safely.  Posts are attributed to the first super admin.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from pathlib import Path

from sqlalchemy.orm import Session

from core.errors import AppError, NotFoundError
from core.logger import logger
from models.post import Post
from models.user import User
from posts import workflow
from posts.content import is_valid_slug
from posts.frontmatter import FrontMatterError, parse_markdown


@dataclass
class ImportReport:
    imported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


def first_super_admin(db: Session) -> User:
    user = db.query(User).filter(User.role == "super_admin").order_by(User.id).first()
    if user is None:
        raise NotFoundError("No super_admin user found. Run bin/seed_admin.py first.")
    return user


def import_file(db: Session, path: Path, author: User) -> bool:
    """Import one file.  Returns False when it was skipped."""
    slug = path.stem
    if not is_valid_slug(slug):
        raise FrontMatterError("slug", f"File name {path.name!r} is not a valid slug")

    front, body = parse_markdown(path.read_text(encoding="utf-8"))
    if front.draft:
        logger.info("Skipping %s (draft)", slug)
        return False
    if db.query(Post.id).filter(Post.slug == slug).first():
        logger.info("Skipping %s (already exists)", slug)
        return False

    workflow.create_post(db, author, {
        "title": front.title,
        "slug": slug,
        "content": body,
        "excerpt": front.excerpt,
        "tags": front.tags,
        "status": "published",
        "published_at": datetime.combine(front.date, time(), tzinfo=timezone.utc),
    })
    return True


def import_directory(db: Session, directory: Path) -> ImportReport:
    author = first_super_admin(db)
    report = ImportReport()
    for path in sorted(Path(directory).glob("*.md")):
        try:
            if import_file(db, path, author):
                report.imported.append(path.stem)
            else:
                report.skipped.append(path.stem)
        except (FrontMatterError, AppError) as exc:
            db.rollback()
            logger.error("Failed to import %s: %s", path.name, exc)
            report.failed.append((path.name, str(exc)))
    return report
