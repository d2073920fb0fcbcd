"""
Jinja2-backed template renderer for page routes and source templates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, select_autoescape

from .helpers import RenderError, markdown_to_html, rich_text_to_html

logger = logging.getLogger(__name__)

HELPERS = {
    "markdown_to_html": markdown_to_html,
    "rich_text_to_html": rich_text_to_html,
}


def normalize_template_id(template_id: str) -> str:
    """Turn ``/pages/page.html`` into the loader-relative ``pages/page.html``."""
    return template_id.replace("\\", "/").lstrip("/")


class TemplateRenderer:
    """
    Render templates from a source directory with the content helpers installed.

    The helpers are available both as globals (``{{ markdown_to_html(text) }}``)
    and as filters (``{{ text | markdown_to_html }}``).
    """

    def __init__(self, source_dir: Path, *, globals: Optional[Mapping[str, Any]] = None) -> None:
        self.source_dir = Path(source_dir)
        self.environment = Environment(
            loader=FileSystemLoader(str(self.source_dir)),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            keep_trailing_newline=True,
        )
        self.environment.globals.update(HELPERS)
        self.environment.filters.update(HELPERS)
        if globals:
            self.environment.globals.update(globals)

    def render(self, template_id: str, locals: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render ``template_id`` with ``locals`` and return the HTML.

        Raises:
            RenderError: If the template is missing, invalid, or fails while rendering.
        """
        name = normalize_template_id(template_id)
        try:
            template = self.environment.get_template(name)
            return template.render(**dict(locals or {}))
        except TemplateNotFound as exc:
            raise RenderError(f"Template not found: {name} (in {self.source_dir})") from exc
        except TemplateError as exc:
            raise RenderError(f"Template {name} failed to render: {exc}") from exc
