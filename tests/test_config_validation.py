from pathlib import Path
import textwrap

import pytest

from cmsite.config import ConfigError, PagesConfig, load_config


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "cmsite.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_defaults_and_relative_paths(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        output_dir = "public"
        """,
    )

    config = load_config(path)

    assert config.source_dir == (tmp_path / "source").resolve()
    assert config.output_dir == (tmp_path / "public").resolve()
    assert config.pages.template == "/pages/page.html"
    assert config.pages.route_pattern == "/pages/{slug}/index.html"
    assert config.pages.limit_for("development") == 10
    assert config.pages.limit_for("production") == 1000
    assert config.contentful.environment == "master"


def test_rejects_unknown_keys(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [pages]
        unexpected = "nope"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "extra" in str(exc.value).lower()


def test_rejects_route_pattern_without_slug(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [pages]
        route_pattern = "/pages/index.html"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "route_pattern" in str(exc.value)


def test_detail_include_must_exceed_listing_include() -> None:
    with pytest.raises(ValueError):
        PagesConfig(listing_include=2, detail_include=2)


def test_rejects_production_limit_above_api_maximum(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [pages]
        production_limit = 5000
        """,
    )

    with pytest.raises(ConfigError):
        load_config(path)


def test_invalid_toml_and_missing_file(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "source_dir = ")

    with pytest.raises(ConfigError) as exc:
        load_config(path)
    assert "Invalid TOML" in str(exc.value)

    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")
