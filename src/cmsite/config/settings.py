"""
Settings/secret loading helpers.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .models import BuildMode, ConfigError

logger = logging.getLogger(__name__)

MODE_ENV_VAR = "CMSITE_MODE"
BUILD_MODES = ("development", "production")


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()


class Secrets(BaseModel):
    """
    Container for Contentful credentials loaded from environment variables.

    Attributes:
        delivery_api_key: Content Delivery API access token.
        space_id: Contentful space identifier.
    """
    delivery_api_key: Optional[str] = Field(default=None, alias="CONTENTFUL_DELIVERY_API_KEY")
    space_id: Optional[str] = Field(default=None, alias="CONTENTFUL_SPACE_ID")

    model_config = {
        "populate_by_name": True,
    }

    def require(self) -> tuple[str, str]:
        """
        Return ``(space_id, delivery_api_key)`` or raise if either is unset.
        """
        missing = [
            field.alias
            for name, field in Secrets.model_fields.items()
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")
        return self.space_id, self.delivery_api_key


@lru_cache(maxsize=1)
def get_secrets() -> Secrets:
    """
    Load secrets from environment/.env exactly once.
    """
    values = {field.alias: os.getenv(field.alias) for field in Secrets.model_fields.values()}
    return Secrets(**values)


def resolve_build_mode(requested: Optional[str], *, default: BuildMode = "production") -> BuildMode:
    """
    Pick the build mode: ``CMSITE_MODE`` wins over the requested value, then the default.

    Raises:
        ConfigError: If the chosen value is not a known build mode.
    """
    env_override = os.getenv(MODE_ENV_VAR)
    source = MODE_ENV_VAR if env_override else "--mode"
    candidate = (env_override or requested or default).strip().lower()
    if candidate not in BUILD_MODES:
        raise ConfigError(f"Unknown build mode {candidate!r} from {source}; expected one of: {', '.join(BUILD_MODES)}")
    return "development" if candidate == "development" else "production"
