"""
Message content rendering.

Converts the caller's message text into the body Graph expects. Markdown is
rendered to HTML; plain text stays plain unless mentions force HTML, in which
case it is escaped and line breaks are kept.
"""

import html
from dataclasses import dataclass
from typing import Literal

import markdown

MessageFormat = Literal["text", "markdown"]
ContentType = Literal["text", "html"]

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


@dataclass(frozen=True)
class RenderedContent:
    content: str
    content_type: ContentType


def markdown_to_html(text: str) -> str:
    """Render markdown to an HTML fragment."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def text_to_html(text: str) -> str:
    """Escape plain text for an HTML body, keeping line breaks.

    Quotes are left alone so ``@"Full Name"`` mentions still match.
    """
    escaped = html.escape(text, quote=False)
    return escaped.replace("\r\n", "\n").replace("\n", "<br>")


def render_content(message: str, format: MessageFormat = "text") -> RenderedContent:
    """Render a message in the given format."""
    if format == "markdown":
        return RenderedContent(content=markdown_to_html(message), content_type="html")
    if format == "text":
        return RenderedContent(content=message, content_type="text")
    raise ValueError(f"Unsupported message format: {format}. Supported formats: text, markdown")
