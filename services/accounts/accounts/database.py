"""
Process-wide engine and session factory for the accounts database.

init_db() runs once in the app lifespan; get_db() hands each request its own
session and transaction.
"""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from accounts.config import Settings
from shared.database.postgres import AsyncSessionFactory, get_async_engine, session_factory_for

_engine: AsyncEngine | None = None
_session_factory: AsyncSessionFactory | None = None


def init_db(settings: Settings) -> None:
    global _engine, _session_factory
    _engine = get_async_engine(
        settings.accounts_database_url,
        ssl_mode=settings.database_ssl,
        ssl_cert=settings.database_ssl_cert,
    )
    _session_factory = session_factory_for(_engine)


async def dispose_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_session_factory() -> AsyncSessionFactory:
    if _session_factory is None:
        raise RuntimeError("Database not initialized")
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Commit when the request succeeds; roll back and re-raise when it does not."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
