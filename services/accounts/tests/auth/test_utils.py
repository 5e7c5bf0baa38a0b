import re

import pytest

from accounts.auth.utils import (
    build_context,
    hash_password,
    new_token,
    tokens_match,
    verify_password,
)

URLSAFE = re.compile(r"^[A-Za-z0-9_-]+$")


@pytest.mark.parametrize("password", ["hunter22", "correct horse battery staple", "pässwörd", " padded "])
def test_hash_then_verify(password: str) -> None:
    digest = hash_password(password)
    assert digest != password
    assert digest.startswith("$argon2")
    assert verify_password(password, digest) is True


def test_verify_rejects_other_password() -> None:
    digest = hash_password("first-password")
    assert verify_password("second-password", digest) is False


def test_hash_is_salted() -> None:
    assert hash_password("same-password") != hash_password("same-password")


def test_digest_carries_its_work_factor() -> None:
    cheap = build_context(rounds=1, memory_cost=64)
    digest = hash_password("work-factor", cheap)
    assert "m=64" in digest and "t=1" in digest
    # Verification reads the parameters back from the digest itself
    assert verify_password("work-factor", digest) is True


@pytest.mark.parametrize("digest", ["", "not-a-hash", "$argon2id$garbage", "$2b$12$short"])
def test_verify_malformed_digest_is_false(digest: str) -> None:
    assert verify_password("anything", digest) is False


def test_new_token_unique() -> None:
    tokens = {new_token() for _ in range(200)}
    assert len(tokens) == 200


def test_new_token_shape() -> None:
    token = new_token()
    # 32 random bytes, base64url without padding
    assert len(token) == 43
    assert URLSAFE.match(token)


def test_tokens_match() -> None:
    token = new_token()
    assert tokens_match(token, token) is True
    assert tokens_match(token, new_token()) is False
    assert tokens_match("", "") is False
    assert tokens_match("", token) is False
    assert tokens_match(token, "") is False
