from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from accounts.auth.constants import AccountMsg
from accounts.auth.dependencies import get_account_store
from accounts.auth.store import InMemoryAccountStore
from accounts.main import app
from accounts.rate_limit import limiter

BASE = "/api/v1/auth/account"
PASSWORD = "password123"


def _register(client: TestClient, username: str = "alice", password: str = PASSWORD):
    return client.post(
        f"{BASE}/newaccount",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password1": password,
            "password2": password,
        },
    )


def _login(client: TestClient, username: str = "alice", password: str = PASSWORD):
    return client.post(f"{BASE}/login", json={"username": username, "password": password})


def _error(response) -> tuple[str, str]:
    body = response.json()
    return body["error"]["code"], body["error"]["message"]


def _verified(client: TestClient, mailer, username: str = "alice") -> None:
    assert _register(client, username).status_code == 201
    assert client.get(mailer.verify[-1].path).status_code == 200


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "accounts"}


# ── Registration, verification, login ────────────────────────────────────────

def test_register_verify_login_me(client: TestClient, mailer) -> None:
    reg = _register(client)
    assert reg.status_code == 201
    assert reg.json() == {
        "username": "alice",
        "email": "alice@example.com",
        "message": "A confirmation e-mail has been sent to alice@example.com.",
    }
    assert len(mailer.verify) == 1
    link = mailer.verify[0]
    assert link.url.startswith("http://testserver/api/v1/auth/account/verify/alice/")

    verified = client.get(link.path)
    assert verified.status_code == 200
    session = verified.json()
    assert session["username"] == "alice"
    assert session["token_type"] == "bearer"
    assert session["message"] == "Your email has been verified."

    me = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {session['access_token']}"})
    assert me.status_code == 200
    assert me.json() == {"username": "alice", "email": "alice@example.com", "email_verified": True}

    login = _login(client)
    assert login.status_code == 200
    data = login.json()
    assert data["status"] == "authenticated"
    assert data["access_token"]
    assert data["expires_in"] == 3600


def test_verify_link_works_once(client: TestClient, mailer) -> None:
    _register(client)
    path = mailer.verify[0].path
    assert client.get(path).status_code == 200

    again = client.get(path)
    assert again.status_code == 401
    assert _error(again) == ("invalid_key", "I'm sorry, but that was an invalid verification key.")
    assert "access_token" not in again.json()


def test_unverified_login_then_resend(client: TestClient, mailer, store) -> None:
    _register(client)
    old_path = mailer.verify[0].path
    token_before = store._accounts["alice"].email_verify_token

    login = _login(client)
    assert login.status_code == 200
    assert login.json()["status"] == "email_unverified"
    assert login.json()["access_token"] is None
    assert store._accounts["alice"].email_verify_token == token_before

    resend = client.post(f"{BASE}/resendverifyemail", json={"username": login.json()["username"]})
    assert resend.status_code == 200
    assert resend.json()["message"] == "A confirmation e-mail has been sent to alice@example.com."
    assert len(mailer.verify) == 2

    assert client.get(old_path).status_code == 401
    assert client.get(mailer.verify[1].path).status_code == 200
    assert _login(client).json()["status"] == "authenticated"


def test_resend_after_verification_conflicts(client: TestClient, mailer) -> None:
    _verified(client, mailer)
    response = client.post(f"{BASE}/resendverifyemail", json={"username": "alice"})
    assert response.status_code == 409
    assert _error(response)[0] == "email_already_verified"


def test_duplicate_username(client: TestClient, mailer) -> None:
    assert _register(client).status_code == 201
    dup = _register(client, password="another-password")
    assert dup.status_code == 409
    code, message = _error(dup)
    assert code == "username_already_exists"
    assert message == "The username alice already exists.  Please choose an alternate username."
    # The first password still works
    assert _login(client).json()["status"] == "email_unverified"


def test_register_password_mismatch(client: TestClient, mailer) -> None:
    response = client.post(
        f"{BASE}/newaccount",
        json={
            "username": "alice",
            "email": "alice@example.com",
            "password1": PASSWORD,
            "password2": "different-password",
        },
    )
    assert response.status_code == 422
    assert _error(response) == ("password_mismatch", "Passwords did not match, please try again.")
    assert mailer.verify == []


def test_register_rejects_bad_username_without_store_calls(client: TestClient, mailer) -> None:
    spy = AsyncMock(spec=InMemoryAccountStore)
    app.dependency_overrides[get_account_store] = lambda: spy

    response = _register(client, username="bad-name")

    assert response.status_code == 422
    assert _error(response) == ("invalid_username", "Invalid username.")
    assert spy.mock_calls == []


def test_register_schema_validation(client: TestClient) -> None:
    response = client.post(
        f"{BASE}/newaccount",
        json={"username": "alice", "email": "not-an-email", "password1": "short", "password2": "short"},
    )
    assert response.status_code == 422
    fields = {error["loc"][-1] for error in response.json()["detail"]}
    assert {"email", "password1"} <= fields


def test_login_failures_share_one_message(client: TestClient, mailer) -> None:
    _verified(client, mailer)
    wrong_password = _login(client, password="wrong-password")
    unknown_user = _login(client, username="nobody")
    bad_username = _login(client, username="not a name")

    for response in (wrong_password, unknown_user, bad_username):
        assert response.status_code == 401
        assert _error(response) == ("invalid_credentials", "Invalid username or password.")


def test_percent_encoded_username_in_links(client: TestClient, mailer) -> None:
    reg = client.post(
        f"{BASE}/newaccount",
        json={"username": "José", "email": "jose@example.com", "password1": PASSWORD, "password2": PASSWORD},
    )
    assert reg.status_code == 201
    link = mailer.verify[0]
    assert "/verify/Jos%C3%A9/" in link.url

    response = client.get(link.path)
    assert response.status_code == 200
    assert response.json()["username"] == "José"


# ── Password reset ────────────────────────────────────────────────────────────

def test_password_reset_flow(client: TestClient, mailer) -> None:
    _verified(client, mailer)

    first = client.post(f"{BASE}/resetpassword", json={"username": "alice"})
    assert first.status_code == 200
    assert first.json() == {"message": "A password reset email has been sent to your email address."}
    client.post(f"{BASE}/resetpassword", json={"username": "alice"})
    t1, t2 = mailer.reset[0], mailer.reset[1]
    assert t1.key != t2.key

    assert client.get(t1.path).status_code == 401
    form = client.get(t2.path)
    assert form.status_code == 200
    assert form.json() == {"username": "alice", "key": t2.key}

    stale = client.post(
        f"{BASE}/setpassword",
        json={"username": "alice", "key": t1.key, "password1": "new-password", "password2": "new-password"},
    )
    assert stale.status_code == 401

    done = client.post(
        f"{BASE}/setpassword",
        json={"username": "alice", "key": t2.key, "password1": "new-password", "password2": "new-password"},
    )
    assert done.status_code == 200
    assert done.json()["message"] == "Your password has been updated."
    assert done.json()["access_token"]

    assert _login(client, password="new-password").json()["status"] == "authenticated"
    assert _login(client).status_code == 401
    assert client.get(t2.path).status_code == 401


def test_set_password_mismatch(client: TestClient, mailer) -> None:
    _verified(client, mailer)
    client.post(f"{BASE}/resetpassword", json={"username": "alice"})
    key = mailer.reset[0].key

    response = client.post(
        f"{BASE}/setpassword",
        json={"username": "alice", "key": key, "password1": "new-password", "password2": "new-passw0rd"},
    )
    assert response.status_code == 422
    assert _error(response)[0] == "password_mismatch"
    # Still usable after a typo
    assert client.get(mailer.reset[0].path).status_code == 200


def test_reset_unknown_username(client: TestClient, mailer) -> None:
    response = client.post(f"{BASE}/resetpassword", json={"username": "nobody"})
    assert response.status_code == 400
    assert _error(response) == ("unknown_username", "Invalid username.")


def test_reset_unknown_username_concealed(client: TestClient, mailer, settings) -> None:
    settings.conceal_unknown_reset_username = True
    response = client.post(f"{BASE}/resetpassword", json={"username": "nobody"})
    assert response.status_code == 200
    assert response.json() == {"message": "A password reset email has been sent to your email address."}
    assert mailer.reset == []


def test_reset_disabled_looks_like_not_found(client: TestClient, mailer, settings) -> None:
    _verified(client, mailer)
    client.post(f"{BASE}/resetpassword", json={"username": "alice"})
    key = mailer.reset[0].key
    settings.allow_password_reset = False

    responses = [
        client.post(f"{BASE}/resetpassword", json={"username": "alice"}),
        client.get(f"{BASE}/newpassword/alice/{key}"),
        client.post(
            f"{BASE}/setpassword",
            json={"username": "alice", "key": key, "password1": "new-password", "password2": "new-password"},
        ),
    ]
    unrouted = client.get(f"{BASE}/nosuchroute")

    assert unrouted.status_code == 404
    for response in responses:
        assert response.status_code == 404
        assert response.json()["error"] == unrouted.json()["error"]
    assert len(mailer.reset) == 1
    assert _login(client).json()["status"] == "authenticated"


# ── Transport concerns ────────────────────────────────────────────────────────

def test_me_requires_bearer(client: TestClient) -> None:
    response = client.get(f"{BASE}/me")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

    forged = client.get(f"{BASE}/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert forged.status_code == 401


def test_request_id_round_trip(client: TestClient) -> None:
    response = client.post(
        f"{BASE}/verify/alice/key", headers={"X-Request-ID": "req-123"}
    )
    assert response.status_code == 405
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["request_id"] == "req-123"


def test_login_is_rate_limited(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    try:
        statuses = [_login(client, password="wrong-password").status_code for _ in range(11)]
    finally:
        limiter.reset()
    assert statuses[0] == 401
    assert statuses[-1] == 429


def test_outcome_messages_are_the_ones_responses_carry() -> None:
    assert {msg.name for msg in AccountMsg} == {
        "INVALID_USERNAME",
        "INVALID_USER_OR_PWD",
        "RESET_PWD_EMAIL_SENT",
        "EMAIL_VERIFIED",
        "EMAIL_UNVERIFIED",
        "PASSWORD_UPDATED",
        "PASSWORD_MISMATCH",
        "INVALID_KEY",
    }
