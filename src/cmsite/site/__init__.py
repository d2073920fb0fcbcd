"""
Route materialization, registration and site output.
"""

from .builder import BuildError, BuildReport, build_site, iter_source_files, output_target
from .routes import (
    MissingRecordError,
    Route,
    fetch_page_record,
    is_safe_slug,
    list_page_slugs,
    materialize_routes,
    route_path,
)
from .sitemap import DuplicateRouteError, Sitemap

__all__ = [
    "BuildError",
    "BuildReport",
    "build_site",
    "iter_source_files",
    "output_target",
    "MissingRecordError",
    "Route",
    "fetch_page_record",
    "is_safe_slug",
    "list_page_slugs",
    "materialize_routes",
    "route_path",
    "DuplicateRouteError",
    "Sitemap",
]
