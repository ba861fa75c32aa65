"""
Markdown → HTML rendering and HTML → plain text extraction.

The orchestrator only knows the MarkdownRenderer protocol; the default
implementation wraps the `markdown` package.
"""

from typing import Protocol

import markdown
from bs4 import BeautifulSoup

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "sane_lists"]


class MarkdownRenderer(Protocol):
    def render(self, text: str) -> str: ...


def markdown_to_html(text: str) -> str:
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


class PythonMarkdownRenderer:
    def render(self, text: str) -> str:
        return markdown_to_html(text)


def html_to_text(html: str) -> str:
    """Visible text of rendered HTML, roughly what a browser would copy."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return soup.get_text().strip()
