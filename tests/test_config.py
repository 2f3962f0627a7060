"""Tests for loading settings from the environment."""

import pytest

from host_info.config import PORT, Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in ("HOST_INFO_HOST", "HOST_INFO_LOG_LEVEL", "HOST_INFO_CPU_SAMPLE_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    assert get_settings() == Settings()


def test_env_overrides_but_port_stays_fixed(monkeypatch):
    monkeypatch.setenv("HOST_INFO_HOST", "127.0.0.1")
    monkeypatch.setenv("HOST_INFO_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("HOST_INFO_CPU_SAMPLE_SECONDS", "0.5")
    monkeypatch.setenv("HOST_INFO_PORT", "9999")

    settings = get_settings()

    assert settings.port == PORT == 3333
    assert settings.host == "127.0.0.1"
    assert settings.log_level == "debug"
    assert settings.cpu_sample_seconds == 0.5
    assert settings.cache_ttl_seconds == 60.0
    assert settings.history_length == 10


def test_settings_are_loaded_once(monkeypatch):
    monkeypatch.setenv("HOST_INFO_HOST", "10.0.0.1")
    first = get_settings()
    monkeypatch.setenv("HOST_INFO_HOST", "10.0.0.2")

    assert get_settings() is first
