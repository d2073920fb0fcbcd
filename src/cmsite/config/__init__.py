"""
Configuration helpers for the site builder.
"""

from .models import BuildMode, ConfigError, ContentfulConfig, PagesConfig, SiteConfig, load_config
from .settings import Secrets, get_secrets, resolve_build_mode

__all__ = [
    "BuildMode",
    "ConfigError",
    "ContentfulConfig",
    "PagesConfig",
    "SiteConfig",
    "load_config",
    "Secrets",
    "get_secrets",
    "resolve_build_mode",
]
