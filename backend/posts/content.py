# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Pure content helpers shared by the post workflow, the public query layer
and the import script.  Nothing in here touches the database.
"""

import math
import re

import markdown

from core.config import settings

# Lowercase alphanumeric words joined by single hyphens
SLUG_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

WORDS_PER_MINUTE = 200

_MD_EXTENSIONS = ["fenced_code", "tables"]

# Order matters: fenced blocks go first so their contents are not mangled
# by the inline rules.
_EXCERPT_RULES = (
    (re.compile(r"```.*?```", re.S), " "),
    (re.compile(r"~~~.*?~~~", re.S), " "),
    (re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*", re.M), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\*\*(.+?)\*\*", re.S), r"\1"),
    (re.compile(r"__(.+?)__", re.S), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"(?<!\w)_(.+?)_(?!\w)"), r"\1"),
    (re.compile(r"`([^`]*)`"), r"\1"),
)


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and SLUG_RE.match(slug) is not None


def generate_excerpt(content: str, max_length: int | None = None) -> str:
    """
    Plain-text preview of markdown *content*.

    Heading, emphasis, link and code markup is removed (link and image text
    is kept), whitespace is collapsed, and the result is cut to *max_length*
    characters with a trailing ``...`` when it was longer.
    """
    if max_length is None:
        max_length = settings.excerpt_length

    text = content or ""
    for pattern, repl in _EXCERPT_RULES:
        text = pattern.sub(repl, text)
    text = re.sub(r"\s+", " ", text).strip()

    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "..."


def reading_time(content: str) -> int:
    """Minutes at 200 words per minute, rounded up, never below 1."""
    words = len((content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def normalize_tag_slug(name: str) -> str:
    """``"Machine Learning!"`` -> ``"machine-learning"``."""
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


def dedupe_tags(tags) -> list[str]:
    """
    Trim tag names and drop empties and repeats, keeping first-seen order.
    Two names are repeats when they normalise to the same slug.
    """
    seen: set[str] = set()
    result: list[str] = []
    for raw in tags or []:
        name = str(raw).strip()
        slug = normalize_tag_slug(name)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        result.append(name)
    return result


def render_markdown(content: str) -> str:
    # A fresh instance per call: Markdown objects keep per-document state
    return markdown.Markdown(extensions=_MD_EXTENSIONS).convert(content or "")
