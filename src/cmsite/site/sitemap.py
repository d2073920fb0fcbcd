"""
Registry of build routes and ignored source paths.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Literal, Set

from ..render import normalize_template_id
from .routes import Route

logger = logging.getLogger(__name__)


class DuplicateRouteError(ValueError):
    """Raised when two routes claim the same output path under the "fail" policy."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate route for output path {path}")
        self.path = path


class Sitemap:
    """
    Collects routes and ignore rules before a build.
    """

    def __init__(self, *, duplicates: Literal["overwrite", "fail"] = "overwrite") -> None:
        self.duplicates = duplicates
        self._routes: Dict[str, Route] = {}
        self._ignored: Set[str] = set()

    def register_routes(self, routes: Iterable[Route]) -> None:
        """
        Register a batch of routes. Later routes for an already-registered path
        replace the earlier one, unless the sitemap was created with ``duplicates="fail"``.

        Under "fail" the whole batch is checked first; nothing is registered if it clashes.
        """
        batch = list(routes)
        if self.duplicates == "fail":
            seen = set(self._routes)
            for route in batch:
                if route.path in seen:
                    raise DuplicateRouteError(route.path)
                seen.add(route.path)
        for route in batch:
            if route.path in self._routes:
                logger.warning("Route %s registered twice; the later one wins", route.path)
            self._routes[route.path] = route

    def ignore(self, path: str) -> None:
        """Exclude a source path (relative to the source directory) from the build output."""
        self._ignored.add(normalize_template_id(path))

    def is_ignored(self, path: str) -> bool:
        return normalize_template_id(path) in self._ignored

    @property
    def routes(self) -> List[Route]:
        return list(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, path: object) -> bool:
        return path in self._routes
