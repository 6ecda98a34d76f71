"""
Unit tests for posts.content – excerpts, reading time, slugs, rendering.
"""
import pytest

from posts.content import (
    dedupe_tags,
    generate_excerpt,
    is_valid_slug,
    normalize_tag_slug,
    reading_time,
    render_markdown,
)


class TestExcerpt:

    def test_markdown_markers_are_stripped(self):
        src = "# Title\n\n**Bold** and *italic* and [link](url)"
        assert generate_excerpt(src) == "Title Bold and italic and link"

    def test_code_is_removed_or_unwrapped(self):
        src = "Intro\n\n```python\nprint('hidden')\n```\n\nUse `pip install` now"
        assert generate_excerpt(src) == "Intro Use pip install now"

    def test_short_text_is_not_truncated(self):
        assert generate_excerpt("Just a line.", max_length=160) == "Just a line."

    def test_long_text_is_truncated_with_ellipsis(self):
        excerpt = generate_excerpt("word " * 100, max_length=20)
        assert excerpt.endswith("...")
        assert len(excerpt) <= 23

    def test_underscores_inside_words_survive(self):
        assert generate_excerpt("call snake_case_name here") == "call snake_case_name here"


class TestReadingTime:

    @pytest.mark.parametrize("words,minutes", [(0, 1), (1, 1), (200, 1), (201, 2), (400, 2), (401, 3)])
    def test_boundaries(self, words, minutes):
        assert reading_time(" ".join(["word"] * words)) == minutes

    def test_whitespace_only_is_one_minute(self):
        assert reading_time("   \n\t ") == 1


class TestSlugs:

    @pytest.mark.parametrize("slug", ["my-post", "post", "a1-b2-c3", "2026"])
    def test_valid(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("slug", ["My Post!", "my_post", "-lead", "trail-", "double--dash", "", "Upper"])
    def test_invalid(self, slug):
        assert not is_valid_slug(slug)

    def test_tag_slug_normalisation(self):
        assert normalize_tag_slug("Machine Learning!") == "machine-learning"
        assert normalize_tag_slug("  C++  ") == "c"
        assert normalize_tag_slug("!!!") == ""

    def test_dedupe_keeps_first_spelling_and_order(self):
        assert dedupe_tags(["Python", " web ", "python", "", "Web"]) == ["Python", "web"]


class TestRender:

    def test_fenced_code_and_tables(self):
        html = render_markdown("```\ncode here\n```\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<pre><code>" in html
        assert "<table>" in html

    def test_headings(self):
        assert render_markdown("# Hello").startswith("<h1>Hello</h1>")
