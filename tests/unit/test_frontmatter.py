"""
Unit tests for posts.frontmatter.
"""
from datetime import date

import pytest

from posts.frontmatter import FrontMatterError, parse_markdown, validate_front_matter

GOOD = """---
title: "Hello World"
date: "2025-12-03"
tags: ["intro", "meta"]
---
# Hello

This is my first post.
"""


def test_parse_valid_file():
    front, body = parse_markdown(GOOD)
    assert front.title == "Hello World"
    assert front.date == date(2025, 12, 3)
    assert front.tags == ["intro", "meta"]
    assert front.draft is False
    assert body.startswith("# Hello")


def test_unquoted_yaml_date_is_accepted():
    front, _ = parse_markdown("---\ntitle: T\ndate: 2025-01-31\ntags: []\n---\nbody\n")
    assert front.date == date(2025, 1, 31)


@pytest.mark.parametrize("data,field", [
    ({"date": "2025-01-01", "tags": []}, "title"),
    ({"title": "  ", "date": "2025-01-01", "tags": []}, "title"),
    ({"title": "T", "tags": []}, "date"),
    ({"title": "T", "date": "01/02/2025", "tags": []}, "date"),
    ({"title": "T", "date": "2025-02-30", "tags": []}, "date"),
    ({"title": "T", "date": "2025-01-01"}, "tags"),
    ({"title": "T", "date": "2025-01-01", "tags": "intro"}, "tags"),
    ({"title": "T", "date": "2025-01-01", "tags": [], "draft": "yes"}, "draft"),
])
def test_invalid_front_matter_names_the_field(data, field):
    with pytest.raises(FrontMatterError) as exc:
        validate_front_matter(data)
    assert exc.value.field == field


def test_unquoted_impossible_date_names_the_field():
    with pytest.raises(FrontMatterError) as exc:
        parse_markdown("---\ntitle: T\ndate: 2025-02-30\ntags: []\n---\nbody\n")
    assert exc.value.field == "date"


def test_missing_header():
    with pytest.raises(FrontMatterError):
        parse_markdown("# No front matter\n")


def test_optional_fields():
    front = validate_front_matter({
        "title": "T", "date": "2025-01-01", "tags": [], "excerpt": "Short", "author": "Kyle", "draft": True,
    })
    assert front.excerpt == "Short"
    assert front.author == "Kyle"
    assert front.draft is True
