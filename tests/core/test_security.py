"""Tests for password hashing and access tokens."""
from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from core.config import Settings, get_settings
from core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test__hash_password__verifies_and_salts() -> None:
    """Test that hashes verify and differ between calls."""
    first = hash_password("s3cret-password")
    second = hash_password("s3cret-password")

    assert first != second
    assert verify_password("s3cret-password", first)
    assert not verify_password("wrong-password", first)


def test__verify_password__malformed_hash_is_false() -> None:
    """Test that a corrupt stored hash fails closed."""
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test__create_access_token__round_trip() -> None:
    """Test that a token decodes to the user ID with an expiry."""
    user_id = uuid4()

    payload = decode_access_token(create_access_token(user_id))

    assert payload["sub"] == str(user_id)
    assert payload["exp"] > payload["iat"]


def test__decode_access_token__expired() -> None:
    """Test that expired tokens are rejected."""
    token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test__decode_access_token__wrong_secret() -> None:
    """Test that tokens signed with another key are rejected."""
    other = Settings(_env_file=None, JWT_SECRET_KEY="some-other-secret-key-for-signing-tokens")
    token = create_access_token(uuid4(), other)

    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(token, get_settings())


def test__decode_access_token__missing_sub() -> None:
    """Test that a token without a subject is rejected."""
    settings = get_settings()
    token = jwt.encode({"exp": 9999999999}, settings.jwt_secret_key, algorithm="HS256")

    with pytest.raises(jwt.MissingRequiredClaimError):
        decode_access_token(token, settings)
