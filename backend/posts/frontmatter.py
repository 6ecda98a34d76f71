# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Markdown files with a YAML front-matter header::

    ---
    title: "Hello World"
    date: "2025-12-03"
    tags: ["intro"]
    ---
    # Hello

Required keys: ``title`` (non-empty string), ``date`` (``YYYY-MM-DD``),
``tags`` (list of strings, may be empty).  Optional: ``excerpt``,
``author``, ``draft`` (default False).
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import yaml

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FENCE_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.S)


class FrontMatterError(ValueError):
    """Front matter is missing or malformed.  ``field`` names the culprit."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


@dataclass
class FrontMatter:
    title: str
    date: date
    tags: list[str] = field(default_factory=list)
    excerpt: Optional[str] = None
    author: Optional[str] = None
    draft: bool = False


def _parse_date(value) -> date:
    # YAML turns an unquoted 2025-12-03 into a date object already
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise FrontMatterError("date", 'Front matter must have a string "date" field')
    if not _DATE_RE.match(value):
        raise FrontMatterError("date", "Date must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise FrontMatterError("date", f"Date is not a valid calendar date: {value}")


def validate_front_matter(data) -> FrontMatter:
    if not isinstance(data, dict):
        raise FrontMatterError("front_matter", "Front matter must be a mapping")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise FrontMatterError("title", 'Front matter must have a string "title" field')

    published = _parse_date(data.get("date"))

    tags = data.get("tags")
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise FrontMatterError("tags", 'Front matter must have a "tags" array of strings')

    draft = data.get("draft", False)
    if not isinstance(draft, bool):
        raise FrontMatterError("draft", '"draft" must be true or false')

    excerpt = data.get("excerpt")
    author = data.get("author")
    return FrontMatter(
        title=title.strip(),
        date=published,
        tags=tags,
        excerpt=str(excerpt) if excerpt is not None else None,
        author=str(author) if author is not None else None,
        draft=draft,
    )


def parse_markdown(text: str) -> tuple[FrontMatter, str]:
    """Split *text* into validated front matter and the markdown body."""
    match = _FENCE_RE.match(text)
    if not match:
        raise FrontMatterError("front_matter", "File does not start with a --- front matter block")
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise FrontMatterError("front_matter", f"Invalid YAML: {exc}")
    except ValueError as exc:
        # An unquoted 2025-02-30 fails inside the YAML timestamp constructor
        raise FrontMatterError("date", f"Date is not a valid calendar date: {exc}")
    return validate_front_matter(data), text[match.end():].lstrip("\r\n")
