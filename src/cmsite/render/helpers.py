"""
Content helpers exposed to page templates.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import mistune
from markupsafe import Markup
from rich_text_renderer import RichTextRenderer

logger = logging.getLogger(__name__)


class RenderError(ValueError):
    """Raised when a content helper cannot turn its input into HTML."""


# Bare URLs stay plain text (no "url" plugin); raw HTML in the source is passed through.
_markdown = mistune.create_markdown(escape=False, plugins=["table"])
_rich_text = RichTextRenderer()


def markdown_to_html(value: Optional[str]) -> Markup:
    """
    Convert Markdown to HTML with tables enabled, autolinking off and HTML escaping off.
    """
    if not value:
        return Markup("")
    if not isinstance(value, str):
        raise RenderError(f"markdown_to_html expects text, got {type(value).__name__}")
    return Markup(_markdown(value))


def rich_text_to_html(value: Optional[Mapping[str, Any]]) -> Markup:
    """
    Convert a Contentful rich text document to HTML.
    """
    if not value:
        return Markup("")
    if not isinstance(value, Mapping) or value.get("nodeType") != "document":
        raise RenderError("rich_text_to_html expects a rich text document node")
    try:
        rendered = _rich_text.render(dict(value))
    except (KeyError, TypeError, AttributeError) as exc:
        raise RenderError(f"rich_text_to_html failed on malformed document: {exc}") from exc
    return Markup(rendered)
