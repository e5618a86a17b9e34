"""Runtime configuration sourced from the environment and an optional .env file."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]
PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DB_PATH = BASE_DIR / "data" / "colleges.duckdb"
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "data" / "catalog.yml"

_ENV_LOADED = False


@dataclass(frozen=True)
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    catalog_path: Path = DEFAULT_CATALOG_PATH
    cache_path: Optional[Path] = None
    cache_max_entries: int = 100
    dedup_timeout: float = 30.0
    log_level: str = "INFO"


def _load_env_once() -> None:
    """Populate os.environ from a local .env file if available."""

    global _ENV_LOADED
    if _ENV_LOADED:
        return

    env_paths = [BASE_DIR / ".env"]
    cwd_path = Path.cwd() / ".env"
    if cwd_path not in env_paths:
        env_paths.append(cwd_path)

    for env_path in env_paths:
        if not env_path.exists():
            continue
        try:
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value
        except OSError:
            logger.debug("Unable to read .env file at %s", env_path)

    _ENV_LOADED = True


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring non-integer %s=%r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric %s=%r", name, raw)
        return default


def _env_path(name: str) -> Optional[Path]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return Path(raw).expanduser()


def load_settings() -> Settings:
    _load_env_once()
    return Settings(
        db_path=_env_path("COLLEGEDIR_DB_PATH") or DEFAULT_DB_PATH,
        catalog_path=_env_path("COLLEGEDIR_CATALOG_PATH") or DEFAULT_CATALOG_PATH,
        cache_path=_env_path("COLLEGEDIR_CACHE_PATH"),
        cache_max_entries=max(1, _env_int("COLLEGEDIR_CACHE_MAX_ENTRIES", 100)),
        dedup_timeout=_env_float("COLLEGEDIR_DEDUP_TIMEOUT", 30.0),
        log_level=(os.getenv("COLLEGEDIR_LOG_LEVEL") or "INFO").strip().upper(),
    )
