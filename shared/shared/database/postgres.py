import ssl
from pathlib import Path
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

AsyncSessionFactory = async_sessionmaker[AsyncSession]


def ssl_connect_args(mode: str = "", cert_path: str = "") -> dict[str, Any]:
    """
    asyncpg ``connect_args`` for a DATABASE_SSL mode.

    ``""``/``disable`` → plain TCP; with a readable CA bundle → verified TLS;
    anything else → ``require`` (encrypted, no certificate verification).
    """
    mode = mode.lower()
    if not mode or mode == "disable":
        return {}
    if cert_path and Path(cert_path).exists():
        return {"ssl": ssl.create_default_context(cafile=cert_path)}
    return {"ssl": "require"}


def engine_options(database_url: str, *, ssl_mode: str = "", ssl_cert: str = "") -> dict[str, Any]:
    # SQLite (tests, local runs) uses a singleton pool that rejects sizing arguments
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }
    connect_args = ssl_connect_args(ssl_mode, ssl_cert)
    if connect_args:
        options["connect_args"] = connect_args
    return options


def get_async_engine(
    database_url: str, *, ssl_mode: str = "", ssl_cert: str = "", **kwargs: Any
) -> AsyncEngine:
    options = engine_options(database_url, ssl_mode=ssl_mode, ssl_cert=ssl_cert)
    return create_async_engine(database_url, **{**options, **kwargs})


def session_factory_for(engine: AsyncEngine, *, expire_on_commit: bool = False) -> AsyncSessionFactory:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
    )
