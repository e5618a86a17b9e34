"""FastAPI entrypoint for the college directory service."""
from __future__ import annotations

import logging
import sys
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .cache import CachePolicy, DuckDBCacheStorage, ResultCache
from .config import Settings, load_settings
from .executor import DuckDBExecutor
from .filters import CourseCatalog, FilterSynchronizer
from .http import colleges
from .repository import CollegeRepository
from .service import CollegeDirectory

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    package_logger = logging.getLogger("collegedir")
    package_logger.setLevel(getattr(logging, level, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    package_logger.handlers.clear()  # avoid duplicate logs if reloading
    package_logger.addHandler(handler)
    package_logger.propagate = False


def build_directory(settings: Settings, executor: DuckDBExecutor) -> CollegeDirectory:
    storage = None
    if settings.cache_path is not None:
        storage = DuckDBCacheStorage(settings.cache_path, max_entries=settings.cache_max_entries)
    cache = ResultCache(
        CachePolicy(),
        storage=storage,
        max_entries=settings.cache_max_entries,
        dedup_timeout=settings.dedup_timeout,
    )
    synchronizer = FilterSynchronizer(CourseCatalog.from_yaml(settings.catalog_path))
    return CollegeDirectory(CollegeRepository(executor), cache=cache, synchronizer=synchronizer)


app = FastAPI(title="College Directory")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(colleges.router)


@app.on_event("startup")
def startup_event() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    executor = DuckDBExecutor(settings.db_path)
    app.state.executor = executor
    app.state.directory = build_directory(settings, executor)
    logger.info(
        "directory_config db_path=%s catalog_path=%s cache_path=%s cache_max_entries=%d",
        settings.db_path,
        settings.catalog_path,
        settings.cache_path,
        settings.cache_max_entries,
    )


@app.on_event("shutdown")
def shutdown_event() -> None:
    executor = getattr(app.state, "executor", None)
    if executor is not None:
        executor.close()
    app.state.directory = None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
