from collections.abc import AsyncGenerator, Generator
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote, urlsplit

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import NullPool, StaticPool

from accounts import database
from accounts.auth.dependencies import get_account_store, get_mailer, get_settings
from accounts.auth.models import Account  # noqa: F401 - register with Base
from accounts.auth.policy import AccountLinks, AccountPolicy
from accounts.auth.store import InMemoryAccountStore
from accounts.config import Settings
from accounts.main import app
from accounts.rate_limit import limiter
from shared.database.postgres import Base, get_async_engine, session_factory_for

TEST_BASE_URL = "http://testserver"
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ── Collaborators ─────────────────────────────────────────────────────────────

@dataclass
class SentEmail:
    username: str
    email: str
    url: str

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def key(self) -> str:
        return unquote(self.path.rsplit("/", 1)[-1])


@dataclass
class RecordingMailer:
    """AccountMailer that keeps every message instead of sending it."""

    verify: list[SentEmail] = field(default_factory=list)
    reset: list[SentEmail] = field(default_factory=list)

    async def send_verify_email(self, username: str, email: str, verify_url: str) -> None:
        self.verify.append(SentEmail(username, email, verify_url))

    async def send_new_password_email(self, username: str, email: str, reset_url: str) -> None:
        self.reset.append(SentEmail(username, email, reset_url))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        public_base_url=TEST_BASE_URL,
        jwt_secret="test-secret",
        smtp_host="",
        brevo_api_key="",
    )


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def policy(mailer: RecordingMailer) -> AccountPolicy:
    return AccountPolicy(mailer=mailer, links=AccountLinks(TEST_BASE_URL))


# ── HTTP ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def client(
    store: InMemoryAccountStore,
    mailer: RecordingMailer,
    settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_account_store] = lambda: store
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# ── Database ──────────────────────────────────────────────────────────────────

def _sqlite_engine(url: str, **kwargs) -> AsyncEngine:
    engine = get_async_engine(url, **kwargs)

    # pysqlite's own transaction handling breaks SAVEPOINTs; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _no_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = _sqlite_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with session_factory_for(engine)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def sql_client(
    tmp_path: Path,
    mailer: RecordingMailer,
    settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    """TestClient on the real store dependencies: get_account_store → SqlAccountStore → get_db."""
    path = tmp_path / "accounts.db"
    schema_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(schema_engine)
    schema_engine.dispose()

    # A fresh connection per session, opened on whichever loop the app runs on
    engine = _sqlite_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    factory = session_factory_for(engine)
    monkeypatch.setattr(database, "get_session_factory", lambda: factory)
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
