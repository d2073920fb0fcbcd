"""
One site build, end to end: list pages, materialize routes, render the site.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..api import ContentSourceClient
from ..config import BuildMode, SiteConfig, get_secrets
from ..render import TemplateRenderer
from ..site import BuildReport, Sitemap, build_site, list_page_slugs, materialize_routes

logger = logging.getLogger(__name__)


def create_client(config: SiteConfig) -> ContentSourceClient:
    """Build a Content Delivery API client from config and environment secrets."""
    return ContentSourceClient.from_config(config.contentful, get_secrets())


def plan_sitemap(config: SiteConfig, client: ContentSourceClient, *, mode: BuildMode) -> Sitemap:
    """
    Query the content source and return a sitemap holding one route per page.

    The shared page template is registered as ignored so it never reaches the output.
    """
    pages = config.pages
    limit = pages.limit_for(mode)
    logger.info("Listing %s entries for a %s build (limit=%d)", pages.content_type, mode, limit)
    slugs = list_page_slugs(client, pages, limit)
    routes = materialize_routes(client, slugs, pages)

    sitemap = Sitemap(duplicates=pages.duplicate_routes)
    sitemap.register_routes(routes)
    sitemap.ignore(pages.template)
    logger.info("Registered %d page route(s)", len(sitemap))
    return sitemap


def execute_build(
    config: SiteConfig,
    *,
    mode: BuildMode = "production",
    clean: bool = True,
    client: Optional[ContentSourceClient] = None,
) -> BuildReport:
    """
    Run a full build for ``config``.

    A client is created (and closed afterwards) unless one is supplied.
    Content source, lookup and rendering errors propagate to the caller.
    """
    owns_client = client is None
    active_client = client or create_client(config)
    try:
        sitemap = plan_sitemap(config, active_client, mode=mode)
    finally:
        if owns_client:
            active_client.close()

    renderer = TemplateRenderer(config.source_dir, globals={"build_mode": mode})
    return build_site(
        sitemap,
        renderer,
        source_dir=config.source_dir,
        output_dir=config.output_dir,
        clean=clean,
        protected=[config.config_path] if config.config_path else (),
    )
