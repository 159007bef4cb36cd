from __future__ import annotations

import logging
from pathlib import Path
from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from services.discovery.adapters.memory import MemoryStore
from services.discovery.adapters.postgrest import PostgrestStore
from services.discovery.adapters.sql import SqlCatalogStore
from services.discovery.store import CATALOG_TABLE, PROVIDERS_TABLE, RemoteStore

from .settings import settings

logger = logging.getLogger(__name__)

_engine = None
_initialized = False


def _ensure_sqlite_path(url: str) -> None:
    try:
        parsed = make_url(url)
    except ArgumentError:
        return
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if not database or database == ":memory:":
        return
    path = Path(database)
    if not path.is_absolute():
        path = Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)


def get_engine():
    global _engine
    if _engine is not None:
        return _engine
    url = settings.resolved_database_url()
    _ensure_sqlite_path(url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    _engine = create_engine(url, echo=False, pool_pre_ping=not url.startswith("sqlite"), connect_args=connect_args)
    return _engine


def init_db() -> None:
    """Create the cached catalog tables if missing (local sqlite or postgres)."""
    global _initialized
    if _initialized:
        return
    engine = get_engine()
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)
    _initialized = True


def get_store() -> RemoteStore:
    """Catalog store accessor for the configured ``STORE_BACKEND``.

    ``sql`` reads the cached tables through SQLAlchemy, ``postgrest`` talks to a
    hosted REST endpoint, ``memory`` serves the bundled demo rows.
    """
    backend = (settings.store_backend or "sql").lower()
    if backend == "postgrest":
        if not settings.postgrest_url:
            raise RuntimeError("STORE_BACKEND=postgrest requires POSTGREST_URL")
        logger.info("catalog store: postgrest at %s", settings.postgrest_url)
        return PostgrestStore(settings.postgrest_url, settings.postgrest_key, timeout=settings.store_timeout_s)
    if backend == "memory":
        from .seed_minimal import DEMO_ITEMS, DEMO_OFFERS

        logger.info("catalog store: in-memory demo rows")
        return MemoryStore({CATALOG_TABLE: DEMO_ITEMS, PROVIDERS_TABLE: DEMO_OFFERS})
    if backend != "sql":
        raise RuntimeError(f"unknown STORE_BACKEND: {settings.store_backend}")
    init_db()
    if settings.seed_demo_catalog:
        from .seed_minimal import seed_minimal

        seed_minimal()
    return SqlCatalogStore(get_engine())
