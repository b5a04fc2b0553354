"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from roxiler_stats.config import DEFAULT_SEED_URL, get_settings

_ENV = (
    "MONGODB_URI", "MONGO_URI", "MONGO_DB", "MONGO_COLLECTION", "MONGO_TLS",
    "STORE_BACKEND", "SEED_URL", "SEED_TIMEOUT", "HOST", "PORT",
    "CORS_ALLOW_ORIGINS", "LOG_PATH", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = get_settings()
    assert s.mongo_uri == "mongodb://localhost:27017"
    assert s.mongo_db == "roxiler"
    assert s.mongo_collection == "transactions"
    assert s.mongo_tls is False
    assert s.store_backend == "mongo"
    assert s.seed_url == DEFAULT_SEED_URL
    assert s.port == 3000
    assert s.cors_allow_origins == ("*",)
    assert s.log_path is None


def test_mongodb_uri_wins_over_mongo_uri(monkeypatch) -> None:
    monkeypatch.setenv("MONGO_URI", "mongodb://other:27017")
    monkeypatch.setenv("MONGODB_URI", "mongodb+srv://cluster.example.net/")
    s = get_settings()
    assert s.mongo_uri == "mongodb+srv://cluster.example.net/"
    assert s.mongo_tls is True


def test_tls_can_be_forced_off(monkeypatch) -> None:
    monkeypatch.setenv("MONGODB_URI", "mongodb+srv://cluster.example.net/")
    monkeypatch.setenv("MONGO_TLS", "false")
    assert get_settings().mongo_tls is False


def test_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("STORE_BACKEND", "Memory")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SEED_TIMEOUT", "2.5")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com,")
    monkeypatch.setenv("LOG_PATH", str(tmp_path / "api.log"))
    s = get_settings()
    assert s.store_backend == "memory"
    assert s.port == 8080
    assert s.seed_timeout == 2.5
    assert s.cors_allow_origins == ("https://a.com", "https://b.com")
    assert s.log_path == tmp_path / "api.log"


@pytest.mark.parametrize(("name", "value"), [("STORE_BACKEND", "redis"), ("PORT", "http"), ("SEED_TIMEOUT", "soon")])
def test_invalid_values_raise(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        get_settings()
