"""
Unit tests for comment clean-up and spam heuristics.
"""
from comments.sanitize import is_likely_spam, sanitize_comment_content


class TestSanitize:

    def test_script_blocks_are_removed_with_their_body(self):
        text = "Nice post<script>alert('x')</script> indeed"
        assert sanitize_comment_content(text) == "Nice post indeed"

    def test_tags_are_stripped_but_text_kept(self):
        assert sanitize_comment_content("<b>bold</b> and <i>italic</i>") == "bold and italic"

    def test_entities_are_decoded(self):
        assert sanitize_comment_content("a &lt; b &amp;&amp; c &gt; d") == "a < b && c > d"

    def test_surrounding_whitespace_is_trimmed(self):
        assert sanitize_comment_content("   hello there   ") == "hello there"


class TestSpam:

    def test_keywords(self):
        assert is_likely_spam("Visit my CASINO for fun")

    def test_too_many_urls(self):
        links = " ".join(f"https://site{i}.example" for i in range(4))
        assert is_likely_spam(links)
        assert not is_likely_spam(" ".join(f"https://site{i}.example" for i in range(3)))

    def test_shouting(self):
        assert is_likely_spam("THIS IS THE BEST ARTICLE EVER WRITTEN")
        assert not is_likely_spam("OK THEN")  # too few letters to judge

    def test_normal_comment(self):
        assert not is_likely_spam("Thanks, this helped me fix my build.")
