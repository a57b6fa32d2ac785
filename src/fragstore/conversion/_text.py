"""Converters between plain text, Markdown and HTML."""

from __future__ import annotations

import html
import re
from html.parser import HTMLParser

from markdown_it import MarkdownIt

_MARKDOWN = MarkdownIt("js-default")

_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header",
        "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table", "tr", "ul",
    }
)
_SKIPPED_TAGS = frozenset({"script", "style", "head", "title"})
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def decode_text(data: bytes) -> str:
    """Decode UTF-8 text, dropping a leading byte-order mark."""
    return data.decode("utf-8-sig")


class _TextExtractor(HTMLParser):
    """Collect the text content of an HTML document."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._chunks: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self._chunks.append(data)

    def text(self) -> str:
        joined = "".join(self._chunks)
        lines = [line.rstrip() for line in joined.splitlines()]
        return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip() + "\n"


def passthrough(data: bytes) -> bytes:
    """Return the data unchanged."""
    return data


def markdown_to_html(data: bytes) -> bytes:
    """Render Markdown source to HTML."""
    return _MARKDOWN.render(decode_text(data)).encode("utf-8")


def html_to_text(data: bytes) -> bytes:
    """Strip HTML markup, keeping the text content."""
    extractor = _TextExtractor()
    extractor.feed(decode_text(data))
    extractor.close()
    return extractor.text().encode("utf-8")


def markdown_to_text(data: bytes) -> bytes:
    """Strip Markdown syntax by rendering to HTML and extracting its text."""
    return html_to_text(markdown_to_html(data))


def text_to_html(data: bytes) -> bytes:
    """Wrap plain text in an escaped ``<pre>`` block."""
    return f"<pre>{html.escape(decode_text(data))}</pre>\n".encode("utf-8")
