import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.auth.models import Account
from accounts.auth.store import SqlAccountStore
from accounts.exceptions import UsernameAlreadyExists


async def _create(store: SqlAccountStore, username: str = "alice") -> Account:
    return await store.create_user(username, f"{username}@example.com", "verify-token", "digest")


@pytest.mark.asyncio
async def test_create_and_load(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    created = await _create(store)

    loaded = await store.load_user("alice")

    assert loaded is created
    assert loaded.id is not None
    assert loaded.email == "alice@example.com"
    assert loaded.email_verified is False
    assert loaded.email_verify_token == "verify-token"
    assert loaded.reset_token == ""
    assert await store.load_user("bob") is None


@pytest.mark.asyncio
async def test_duplicate_username_keeps_transaction_usable(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    await _create(store)

    with pytest.raises(UsernameAlreadyExists) as exc_info:
        await store.create_user("alice", "other@example.com", "other-token", "other-digest")

    assert exc_info.value.username == "alice"
    assert isinstance(exc_info.value.__cause__, IntegrityError)
    # Only the savepoint was rolled back: the first row and the session survive
    await _create(store, "bob")
    rows = (await db_session.execute(select(Account.username, Account.email))).all()
    assert sorted(tuple(row) for row in rows) == [("alice", "alice@example.com"), ("bob", "bob@example.com")]


@pytest.mark.asyncio
async def test_mark_verified_clears_token(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    account = await _create(store)

    await store.mark_verified(account)
    db_session.expire_all()

    reloaded = await store.load_user("alice")
    assert reloaded.email_verified is True
    assert reloaded.email_verify_token == ""


@pytest.mark.asyncio
async def test_verified_account_cannot_hold_a_verify_token(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    account = await _create(store)
    await store.mark_verified(account)

    with pytest.raises(IntegrityError):
        await store.set_verify_token(account, "sneaky")


@pytest.mark.asyncio
async def test_token_setters_overwrite(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    account = await _create(store)

    await store.set_verify_token(account, "second-verify")
    await store.set_reset_token(account, "first-reset")
    await store.set_reset_token(account, "second-reset")
    db_session.expire_all()

    reloaded = await store.load_user("alice")
    assert reloaded.email_verify_token == "second-verify"
    assert reloaded.reset_token == "second-reset"


@pytest.mark.asyncio
async def test_set_password_clears_reset_token(db_session: AsyncSession) -> None:
    store = SqlAccountStore(db_session)
    account = await _create(store)
    await store.set_reset_token(account, "reset-me")

    await store.set_password(account, "new-digest")
    db_session.expire_all()

    reloaded = await store.load_user("alice")
    assert reloaded.password_hash == "new-digest"
    assert reloaded.reset_token == ""
