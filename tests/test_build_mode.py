import pytest

from cmsite.config import ConfigError, resolve_build_mode


def test_requested_mode_used_without_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CMSITE_MODE", raising=False)

    assert resolve_build_mode("Development") == "development"
    assert resolve_build_mode(None) == "production"


def test_env_overrides_requested_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CMSITE_MODE", "development")

    assert resolve_build_mode("production") == "development"


def test_unknown_mode_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CMSITE_MODE", raising=False)

    with pytest.raises(ConfigError, match="staging"):
        resolve_build_mode("staging")


def test_unknown_env_mode_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CMSITE_MODE", "prod")

    with pytest.raises(ConfigError, match="CMSITE_MODE"):
        resolve_build_mode("development")
