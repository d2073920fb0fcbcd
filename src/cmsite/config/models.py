"""
Pydantic models for validating site configuration files.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator

BuildMode = Literal["development", "production"]

# Upper bound the Content Delivery API accepts for a single page of results.
MAX_QUERY_LIMIT = 1000


class ConfigError(RuntimeError):
    """Raised when configuration files or secrets cannot be loaded or validated."""


class PagesConfig(BaseModel):
    """
    How page entries are listed, looked up and turned into routes.

    Attributes:
        content_type: Contentful content type id of page entries.
        slug_field: Field holding the page slug.
        template: Shared template every page route renders through.
        route_pattern: Output path pattern; must contain ``{slug}``.
        locals_key: Name the page record is exposed under inside the template.
        listing_include: Link include depth for the slug listing query.
        detail_include: Link include depth for the per-slug detail query.
        development_limit: Listing limit for development builds.
        production_limit: Listing limit for production builds.
        on_missing: "fail" raises when a listed slug has no record, "skip" drops it.
        duplicate_routes: "overwrite" keeps the last route for a path, "fail" raises.
    """

    model_config = ConfigDict(extra="forbid")

    content_type: str = "page"
    slug_field: str = "slug"
    template: str = "/pages/page.html"
    route_pattern: str = "/pages/{slug}/index.html"
    locals_key: str = "page"
    listing_include: int = Field(default=0, ge=0, le=10)
    detail_include: int = Field(default=2, ge=0, le=10)
    development_limit: int = Field(default=10, ge=1, le=MAX_QUERY_LIMIT)
    production_limit: int = Field(default=1000, ge=1, le=MAX_QUERY_LIMIT)
    on_missing: Literal["fail", "skip"] = "fail"
    duplicate_routes: Literal["overwrite", "fail"] = "overwrite"

    @field_validator("route_pattern")
    @classmethod
    def _pattern_has_slug(cls, value: str) -> str:
        if "{slug}" not in value:
            raise ValueError("route_pattern must contain a {slug} placeholder")
        return value

    @field_validator("template")
    @classmethod
    def _template_not_blank(cls, value: str) -> str:
        if not value.strip("/ "):
            raise ValueError("template must name a file under the source directory")
        return value

    @model_validator(mode="after")
    def _detail_deeper_than_listing(self) -> "PagesConfig":
        if self.detail_include <= self.listing_include:
            raise ValueError("detail_include must be greater than listing_include")
        return self

    def limit_for(self, mode: BuildMode) -> int:
        """Return the listing query limit for the given build mode."""
        return self.production_limit if mode == "production" else self.development_limit


class ContentfulConfig(BaseModel):
    """
    Non-secret connection settings for the Content Delivery API.
    """

    model_config = ConfigDict(extra="forbid")

    host: str = "cdn.contentful.com"
    environment: str = "master"
    locale: Optional[str] = None
    timeout: float = Field(default=20.0, gt=0)
    max_retries: int = Field(default=3, ge=1, le=10)


class SiteConfig(BaseModel):
    """
    Top-level configuration for a site build.

    Attributes:
        source_dir: Directory holding templates, layouts and static files.
        output_dir: Directory the built site is written to.
        pages: Page listing and routing options.
        contentful: Delivery API connection options.
    """

    model_config = ConfigDict(extra="forbid")

    source_dir: Path = Path("source")
    output_dir: Path = Path("build")
    pages: PagesConfig = Field(default_factory=PagesConfig)
    contentful: ContentfulConfig = Field(default_factory=ContentfulConfig)
    _config_path: Optional[Path] = PrivateAttr(default=None)

    @property
    def config_path(self) -> Optional[Path]:
        """File this config was loaded from, if any."""
        return self._config_path


def load_config(path: Path | str) -> SiteConfig:
    """
    Load and validate a TOML config file into a SiteConfig instance.

    Relative ``source_dir``/``output_dir`` values are resolved against the
    directory containing the config file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    try:
        config = SiteConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    base = config_path.parent
    anchored = config.model_copy(
        update={
            "source_dir": _anchor(config.source_dir, base),
            "output_dir": _anchor(config.output_dir, base),
        }
    )
    anchored._config_path = config_path
    return anchored


def _anchor(value: Path, base: Path) -> Path:
    expanded = value.expanduser()
    if not expanded.is_absolute():
        expanded = base / expanded
    return expanded.resolve()
