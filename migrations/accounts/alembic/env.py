"""
Alembic environment for the accounts database.

The URL comes from the service's own Settings (ACCOUNTS_DATABASE_URL, .env), so
migrations always target the database the service itself would open.
"""
import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config

# <repo>/migrations/accounts/alembic/env.py → parents[3] is the repo root
_REPO_ROOT = Path(__file__).resolve().parents[3]
for _path in (_REPO_ROOT / "shared", _REPO_ROOT / "services" / "accounts"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from accounts.auth.models import Account  # noqa: E402,F401 - registers the table
from accounts.config import Settings  # noqa: E402
from shared.database.postgres import Base, ssl_connect_args  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = Settings()
url = settings.accounts_database_url
# configparser interpolates '%': URL-encoded passwords need it doubled
config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most things in place; batch mode rebuilds the table instead
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it (review / DBA hand-off)."""
    _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_with(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=ssl_connect_args(settings.database_ssl, settings.database_ssl_cert),
    )
    async with engine.connect() as connection:
        await connection.run_sync(_run_with)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
