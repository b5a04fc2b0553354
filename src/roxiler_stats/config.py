"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the environment (after loading `.env` from the project root) and
validates the few values that have a closed set of options.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_SEED_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
STORE_BACKENDS = ("mongo", "memory")


@dataclass(frozen=True)
class Settings:
    """Container for service configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        mongo_collection: Collection holding the transactions.
        mongo_tls: Whether to connect with TLS using the certifi CA bundle.
        store_backend: `mongo` or `memory`.
        seed_url: URL of the JSON dump used by `/initialize`.
        seed_timeout: Timeout in seconds for the dump download.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        cors_allow_origins: Origins allowed by the CORS middleware.
        log_path: Optional file that also receives log records.
        log_level: Root logging level name.
    """
    mongo_uri: str
    mongo_db: str
    mongo_collection: str
    mongo_tls: bool
    store_backend: str
    seed_url: str
    seed_timeout: float
    host: str
    port: int
    cors_allow_origins: tuple[str, ...]
    log_path: Path | None
    log_level: str


def _env_flag(name: str) -> bool | None:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return None
    return raw in {"1", "true", "yes", "on"}


def _parse_number(name: str, raw: str, cast: type) -> float | int:
    try:
        return cast(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be numeric, got {raw!r}") from exc


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `STORE_BACKEND` is unknown or `PORT` / `SEED_TIMEOUT`
            are not numeric.
    """
    mongo_uri = (
        os.getenv("MONGODB_URI")
        or os.getenv("MONGO_URI")
        or "mongodb://localhost:27017"
    ).strip()
    mongo_db = os.getenv("MONGO_DB", "roxiler").strip() or "roxiler"
    mongo_collection = os.getenv("MONGO_COLLECTION", "transactions").strip() or "transactions"

    mongo_tls = _env_flag("MONGO_TLS")
    if mongo_tls is None:
        mongo_tls = mongo_uri.startswith("mongodb+srv://")

    store_backend = os.getenv("STORE_BACKEND", "mongo").strip().lower() or "mongo"
    if store_backend not in STORE_BACKENDS:
        raise RuntimeError(
            f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {store_backend!r}"
        )

    seed_url = os.getenv("SEED_URL", DEFAULT_SEED_URL).strip() or DEFAULT_SEED_URL
    seed_timeout = float(_parse_number("SEED_TIMEOUT", os.getenv("SEED_TIMEOUT", "30"), float))

    host = os.getenv("HOST", "0.0.0.0").strip() or "0.0.0.0"
    port = int(_parse_number("PORT", os.getenv("PORT", "3000"), int))

    raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
    origins = tuple(o.strip() for o in raw_origins.split(",") if o.strip()) or ("*",)

    raw_log_path = os.getenv("LOG_PATH", "").strip()
    log_path = Path(raw_log_path) if raw_log_path else None
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        mongo_collection=mongo_collection,
        mongo_tls=mongo_tls,
        store_backend=store_backend,
        seed_url=seed_url,
        seed_timeout=seed_timeout,
        host=host,
        port=port,
        cors_allow_origins=origins,
        log_path=log_path,
        log_level=log_level,
    )
