from shared.database.postgres import (
    AsyncSessionFactory,
    Base,
    get_async_engine,
    session_factory_for,
)

__all__ = [
    "AsyncSessionFactory",
    "Base",
    "get_async_engine",
    "session_factory_for",
]
