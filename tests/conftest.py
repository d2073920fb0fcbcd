from __future__ import annotations

from pathlib import Path
import textwrap
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cmsite.api import Entry

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{{ page.fields.title }}</title></head>
<body>
<h1>{{ page.fields.title }}</h1>
<div class="body">{{ page.fields.body | markdown_to_html }}</div>
</body>
</html>
"""


class FakeContentClient:
    """
    Stand-in for ContentSourceClient that serves page fields from a dict.
    """

    def __init__(self, pages: Dict[str, Dict[str, Any]], listing: Optional[List[str]] = None) -> None:
        self.pages = pages
        self.listing = list(pages) if listing is None else listing
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def entries(self, content_type, *, include=0, select=None, limit=None, filters=None):
        self.calls.append(
            {
                "content_type": content_type,
                "include": include,
                "select": select,
                "limit": limit,
                "filters": dict(filters or {}),
            }
        )
        if not filters:
            slugs = self.listing[:limit] if limit else self.listing
            return [
                Entry(id=f"list-{index}", content_type=content_type, fields={"slug": slug})
                for index, slug in enumerate(slugs)
            ]
        slug = filters["fields.slug"]
        if slug not in self.pages:
            return []
        fields = {"slug": slug, **self.pages[slug]}
        return [Entry(id=f"entry-{slug}", content_type=content_type, fields=fields)]

    def detail_calls(self) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["filters"]]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fake_client_factory():
    return FakeContentClient


@pytest.fixture
def sample_site(tmp_path: Path) -> Dict[str, Path]:
    """
    Write a small site (config + source tree) and return its paths.
    """
    root = tmp_path / "site"
    source = root / "source"
    (source / "pages").mkdir(parents=True)
    (source / "layouts").mkdir()
    (source / "css").mkdir()

    (source / "pages" / "page.html").write_text(PAGE_TEMPLATE, encoding="utf-8")
    (source / "index.html").write_text("<p>Home ({{ build_mode }})</p>\n", encoding="utf-8")
    (source / "_nav.html").write_text("<nav></nav>\n", encoding="utf-8")
    (source / "layouts" / "base.html").write_text("<html>{% block body %}{% endblock %}</html>\n", encoding="utf-8")
    (source / "css" / "site.css").write_text("body { color: black; }\n", encoding="utf-8")

    config_path = root / "cmsite.toml"
    config_path.write_text(
        textwrap.dedent(
            """
            source_dir = "source"
            output_dir = "build"

            [pages]
            content_type = "page"
            development_limit = 10
            production_limit = 1000

            [contentful]
            environment = "master"
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    return {"root": root, "config": config_path, "source": source, "output": root / "build"}
