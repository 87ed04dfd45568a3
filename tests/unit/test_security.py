"""
Password hashing, token helpers and bearer parsing.
"""

from datetime import timedelta

import jwt

from crudsuite.api.authorization import extract_bearer
from crudsuite.api.security import (
    ACCESS,
    REFRESH,
    _create_token,
    create_access_token,
    create_refresh_token,
    hash_password,
    issue_token_pair,
    verify_password,
    verify_token,
)


def test_password_round_trip():
    hashed = hash_password("Passw0rd!")
    assert hashed != "Passw0rd!"
    assert verify_password("Passw0rd!", hashed)
    assert not verify_password("passw0rd!", hashed)


def test_malformed_hash_does_not_verify():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_access_token_claims():
    payload = verify_token(create_access_token("abc", "todoMember"))
    assert payload["sub"] == "abc"
    assert payload["type"] == "todoMember"
    assert payload["kind"] == ACCESS
    assert payload["exp"] > payload["iat"]


def test_refresh_token_kind():
    payload = verify_token(create_refresh_token("abc", "shoppingSeller"))
    assert payload["kind"] == REFRESH
    assert payload["type"] == "shoppingSeller"


def test_expired_token_is_rejected():
    token = _create_token("abc", "todoMember", ACCESS, timedelta(seconds=-30))
    assert verify_token(token) is None


def test_foreign_signature_is_rejected():
    token = jwt.encode({"sub": "abc", "type": "todoMember", "kind": ACCESS}, "other-secret", algorithm="HS256")
    assert verify_token(token) is None


def test_garbage_is_rejected():
    assert verify_token("not.a.jwt") is None


def test_issue_token_pair_expiries():
    pair = issue_token_pair("abc", "communityMember")
    assert set(pair) == {"access", "refresh", "expired_at", "refreshable_until"}
    assert pair["refreshable_until"] - pair["expired_at"] > timedelta(days=6)


def test_extract_bearer():
    assert extract_bearer(None) is None
    assert extract_bearer("") is None
    assert extract_bearer("Bearer abc") == "abc"
    assert extract_bearer("bearer   abc ") == "abc"
    assert extract_bearer("abc") == "abc"
