"""
HTML rendering: content helpers and the template renderer.
"""

from .helpers import RenderError, markdown_to_html, rich_text_to_html
from .templates import TemplateRenderer, normalize_template_id

__all__ = [
    "RenderError",
    "markdown_to_html",
    "rich_text_to_html",
    "TemplateRenderer",
    "normalize_template_id",
]
