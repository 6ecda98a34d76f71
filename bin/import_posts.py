# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Import markdown posts into the database.

    python bin/import_posts.py content/posts

Every ``*.md`` file needs a YAML front-matter header (title, date, tags).
Drafts and slugs already present are skipped.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

import click  # noqa: E402

from core.errors import AppError            # noqa: E402
from database import SessionLocal           # noqa: E402
from posts.importer import import_directory  # noqa: E402


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, dir_okay=True))
def main(directory: str):
    """Import every *.md file in DIRECTORY as a published post."""
    db = SessionLocal()
    try:
        report = import_directory(db, directory)
    except AppError as exc:
        raise click.ClickException(exc.message)
    finally:
        db.close()

    for slug in report.imported:
        click.secho(f"imported  {slug}", fg="green")
    for slug in report.skipped:
        click.echo(f"skipped   {slug}")
    for name, reason in report.failed:
        click.secho(f"failed    {name}: {reason}", fg="red")

    click.echo(f"\n{len(report.imported)} imported, {len(report.skipped)} skipped, {len(report.failed)} failed")
    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
