from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine

from backend.settings import get_settings

logger = logging.getLogger(__name__)

_ASYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "postgresql+psycopg2://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    if not url:
        return url
    for prefix, replacement in _ASYNC_DRIVER_PREFIXES.items():
        if url.startswith(prefix):
            url = replacement + url[len(prefix) :]
            break
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parsed = urlparse(url)
        clean = []
        ssl_requested = False
        for key, value in parse_qsl(parsed.query, keep_blank_values=True):
            if key == "sslmode":
                ssl_requested = True
                continue
            if key in {"channel_binding", "ssl"}:
                continue
            clean.append((key, value))
        if ssl_requested:
            clean.append(("ssl", "true"))
        url = urlunparse(parsed._replace(query=urlencode(clean)))
    except ValueError:
        logger.debug("Could not rewrite query string of database URL.")
    return url


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = normalize_database_url(get_settings().database_url)
        if db_url.startswith("sqlite"):
            _engine = create_async_engine(db_url, future=True)
        else:
            engine_kwargs = {"pool_pre_ping": True, "future": True, "pool_size": 10, "max_overflow": 5}
            host = urlparse(db_url).hostname or ""
            if host and host not in {"localhost", "127.0.0.1"}:
                engine_kwargs["connect_args"] = {"ssl": True}
            _engine = create_async_engine(db_url, **engine_kwargs)
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
