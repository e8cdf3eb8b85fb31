"""Tests for message content rendering."""

import pytest

from teams_mentions.rendering import markdown_to_html, render_content, text_to_html


class TestMarkdownToHtml:
    """Tests for markdown_to_html function."""

    def test_bold(self):
        """Test basic inline formatting."""
        assert markdown_to_html("**bold**") == "<p><strong>bold</strong></p>"

    def test_list(self):
        """Test that lists render."""
        html = markdown_to_html("- one\n- two")

        assert "<ul>" in html
        assert "<li>one</li>" in html

    def test_table(self):
        """Test that the extra extension renders tables."""
        html = markdown_to_html("| a | b |\n|---|---|\n| 1 | 2 |")

        assert "<table>" in html

    def test_quoted_mentions_survive(self):
        """Test that @"Full Name" is left intact for injection."""
        assert '@"John Doe"' in markdown_to_html('Hi @"John Doe"')


class TestTextToHtml:
    """Tests for text_to_html function."""

    def test_escapes_markup(self):
        """Test that angle brackets and ampersands are escaped."""
        assert text_to_html("a < b & c > d") == "a &lt; b &amp; c &gt; d"

    def test_keeps_quotes(self):
        """Test that quotes are not escaped."""
        assert text_to_html('@"John Doe"') == '@"John Doe"'

    def test_line_breaks(self):
        """Test that newlines become <br>."""
        assert text_to_html("one\ntwo\r\nthree") == "one<br>two<br>three"


class TestRenderContent:
    """Tests for render_content function."""

    def test_text(self):
        """Test that plain text is passed through."""
        rendered = render_content("hello <world>", "text")

        assert rendered.content == "hello <world>"
        assert rendered.content_type == "text"

    def test_markdown(self):
        """Test that markdown becomes HTML."""
        rendered = render_content("*hi*", "markdown")

        assert rendered.content == "<p><em>hi</em></p>"
        assert rendered.content_type == "html"

    def test_unknown_format(self):
        """Test that unknown formats are rejected."""
        with pytest.raises(ValueError, match="Unsupported message format"):
            render_content("hi", "rst")
