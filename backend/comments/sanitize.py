# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Comment text clean-up and the spam heuristics shown to moderators."""

import html
import re

import bleach

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.I | re.S)
_URL_RE = re.compile(r"https?://", re.I)

SPAM_KEYWORDS = (
    "viagra",
    "casino",
    "lottery",
    "click here",
    "buy now",
    "make money fast",
    "work from home",
    "weight loss",
)
MAX_URLS = 3


def sanitize_comment_content(content: str) -> str:
    """
    Reduce submitted text to plain text: script blocks are dropped with
    their bodies, every other tag is stripped (its text kept), entities are
    decoded and surrounding whitespace trimmed.
    """
    text = _SCRIPT_RE.sub("", content or "")
    text = bleach.clean(text, tags=[], attributes={}, strip=True)
    return html.unescape(text).strip()


def is_likely_spam(content: str) -> bool:
    lowered = content.lower()
    if any(word in lowered for word in SPAM_KEYWORDS):
        return True

    if len(_URL_RE.findall(content)) > MAX_URLS:
        return True

    # Shouting: more than half of 20+ ASCII letters are capitals
    letters = [c for c in content if c.isascii() and c.isalpha()]
    if len(letters) > 20 and sum(c.isupper() for c in letters) / len(letters) > 0.5:
        return True

    return False
