from __future__ import annotations

import pytest

from radiocode import config
from radiocode.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_dotenv", lambda override=False: False)
    for name in ("RADIOCODE_API_KEY", "RADIOCODE_API_URL", "RADIOCODE_TIMEOUT_S", "RADIOCODE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = config.load_settings()
    assert settings.api_key is None
    assert settings.api_url == config.DEFAULT_API_URL
    assert settings.timeout_s is None
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RADIOCODE_API_KEY", "ABCD-ABCD-ABCD-ABCD")
    monkeypatch.setenv("RADIOCODE_API_URL", "https://radio.example/api")
    monkeypatch.setenv("RADIOCODE_TIMEOUT_S", "2.5")
    monkeypatch.setenv("RADIOCODE_LOG_LEVEL", "DEBUG")

    settings = config.load_settings()
    assert settings.api_key == "ABCD-ABCD-ABCD-ABCD"
    assert settings.api_url == "https://radio.example/api"
    assert settings.timeout_s == 2.5
    assert settings.log_level == "DEBUG"


def test_empty_key_is_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RADIOCODE_API_KEY", "")
    assert config.load_settings().api_key is None


@pytest.mark.parametrize("raw", ["abc", "0", "-1"])
def test_invalid_timeout_names_the_variable(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("RADIOCODE_TIMEOUT_S", raw)

    with pytest.raises(ConfigError, match="RADIOCODE_TIMEOUT_S"):
        config.load_settings()
