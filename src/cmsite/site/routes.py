"""
Turn page slugs from the content source into build routes.

Listing and lookup happen here; registration is left to the caller, which
receives the complete list of routes in one go (see ``Sitemap.register_routes``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from ..api import ContentSourceClient, Record
from ..config import PagesConfig

logger = logging.getLogger(__name__)


class MissingRecordError(LookupError):
    """Raised when a listed slug has no matching page record."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No page record found for slug '{slug}'")
        self.slug = slug


@dataclass(frozen=True)
class Route:
    """
    One output file: its path, the template it renders and the template locals.
    """
    path: str
    template: str
    locals: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


def route_path(pattern: str, slug: str) -> str:
    """Expand ``{slug}`` in ``pattern`` and make the result absolute."""
    path = pattern.replace("{slug}", slug)
    return path if path.startswith("/") else f"/{path}"


def is_safe_slug(slug: str) -> bool:
    """Return True if ``slug`` can stand in for one path segment."""
    return slug not in {"", ".", ".."} and not any(sep in slug for sep in ("/", "\\"))


def list_page_slugs(client: ContentSourceClient, pages: PagesConfig, limit: int) -> List[str]:
    """
    Fetch the slugs of all page entries, in listing order.

    Records without a usable slug are skipped with a warning.
    """
    slug_field = pages.slug_field
    records = client.entries(
        pages.content_type,
        include=pages.listing_include,
        select=f"fields.{slug_field}",
        limit=limit,
    )
    slugs: List[str] = []
    for record in records:
        slug = record.fields.get(slug_field)
        if not isinstance(slug, str) or not slug.strip():
            logger.warning("Skipping %s entry %s without a '%s' value", pages.content_type, record.id, slug_field)
            continue
        slugs.append(slug)
    logger.info("Listed %d page slug(s) (limit=%d)", len(slugs), limit)
    return slugs


def fetch_page_record(client: ContentSourceClient, pages: PagesConfig, slug: str) -> Record:
    """
    Look up the full record for ``slug``.

    Raises:
        MissingRecordError: If the lookup returns nothing.
    """
    records = client.entries(
        pages.content_type,
        include=pages.detail_include,
        filters={f"fields.{pages.slug_field}": slug},
    )
    if not records:
        raise MissingRecordError(slug)
    if len(records) > 1:
        logger.warning("Slug '%s' matched %d records; using the first (%s)", slug, len(records), records[0].id)
    return records[0]


def materialize_routes(client: ContentSourceClient, slugs: Iterable[str], pages: PagesConfig) -> List[Route]:
    """
    Build one route per slug, each carrying the slug's full page record.

    Issues one detail query per slug, in order. Slugs that are not a single
    path segment (".", "..", or containing a slash) are skipped with a warning
    and never queried. Duplicate slugs are not collapsed here; they produce
    duplicate routes for the sitemap to settle.

    Raises:
        MissingRecordError: If a slug has no record and ``pages.on_missing`` is "fail".
    """
    routes: List[Route] = []
    for slug in slugs:
        if not is_safe_slug(slug):
            logger.warning("Skipping slug %r; it is not a single path segment", slug)
            continue
        try:
            record = fetch_page_record(client, pages, slug)
        except MissingRecordError:
            if pages.on_missing == "skip":
                logger.warning("No page record for slug '%s'; skipping its route", slug)
                continue
            raise
        locals: Dict[str, Any] = {pages.locals_key: record}
        routes.append(Route(path=route_path(pages.route_pattern, slug), template=pages.template, locals=locals))
        logger.debug("Materialized route %s", routes[-1].path)
    return routes
