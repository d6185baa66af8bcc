"""
Unit tests for core.security module.
Tests password hashing, JWT token creation/validation and
Authorization header resolution.
"""
import pytest
import datetime as dt

import jwt

from app.core.errors import Forbidden, Unauthenticated
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    resolve_identity,
    Identity,
    JWT_ALG,
    JWT_SECRET,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        """Password hashing should produce different hashes (salt included)."""
        password = "TestPassword123"
        assert hash_password(password) != hash_password(password)

    def test_hash_password_does_not_store_plain_text(self):
        password = "TestPassword123"
        hashed = hash_password(password)
        assert isinstance(hashed, str)
        assert password not in hashed

    def test_verify_password_correct_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("TestPassword123", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("WrongPassword456", hashed) is False


class TestJWTTokens:
    """Tests for JWT token creation and validation."""

    def test_token_subject_is_user_id(self):
        token = create_access_token(42)
        payload = decode_access_token(token)
        assert payload["sub"] == "42"

    def test_token_has_no_role_claim(self):
        payload = decode_access_token(create_access_token(42))
        assert set(payload) == {"sub", "iat", "exp"}

    def test_token_expiration_time(self):
        """Token expiration should match configured time (24h by default)."""
        payload = decode_access_token(create_access_token(1))
        diff_minutes = (payload["exp"] - payload["iat"]) / 60
        assert abs(diff_minutes - ACCESS_TOKEN_EXPIRE_MINUTES) < 1
        assert payload["exp"] > dt.datetime.now(dt.timezone.utc).timestamp()

    def test_decode_access_token_invalid_token(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token("invalid.token.here")

    def test_decode_access_token_wrong_secret(self):
        token = create_access_token(7)
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, "wrong-secret", algorithms=["HS256"])

    def test_decode_rejects_token_without_expiry(self):
        token = jwt.encode({"sub": "7"}, JWT_SECRET, algorithm=JWT_ALG)
        with pytest.raises(jwt.MissingRequiredClaimError):
            decode_access_token(token)


class TestResolveIdentity:
    """Missing credentials are 401, bad credentials are 403."""

    def test_valid_bearer_token(self):
        token = create_access_token(5)
        assert resolve_identity(f"Bearer {token}") == Identity(user_id=5)

    def test_scheme_is_case_insensitive(self):
        token = create_access_token(5)
        assert resolve_identity(f"bearer {token}").user_id == 5

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   "])
    def test_missing_token_is_unauthenticated(self, header):
        with pytest.raises(Unauthenticated) as exc_info:
            resolve_identity(header)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "No token provided"

    def test_wrong_scheme_is_forbidden(self):
        token = create_access_token(5)
        with pytest.raises(Forbidden):
            resolve_identity(f"Basic {token}")

    def test_garbage_token_is_forbidden(self):
        with pytest.raises(Forbidden) as exc_info:
            resolve_identity("Bearer not-a-jwt")
        assert exc_info.value.status_code == 403

    def test_expired_token_is_forbidden(self):
        past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=1)
        token = jwt.encode({"sub": "5", "iat": past, "exp": past}, JWT_SECRET, algorithm=JWT_ALG)
        with pytest.raises(Forbidden):
            resolve_identity(f"Bearer {token}")

    def test_non_numeric_subject_is_forbidden(self):
        exp = dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=1)
        token = jwt.encode({"sub": "alice", "exp": exp}, JWT_SECRET, algorithm=JWT_ALG)
        with pytest.raises(Forbidden):
            resolve_identity(f"Bearer {token}")

    def test_token_signed_with_other_secret_is_forbidden(self):
        exp = dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=1)
        token = jwt.encode({"sub": "5", "exp": exp}, "another-secret", algorithm=JWT_ALG)
        with pytest.raises(Forbidden):
            resolve_identity(f"Bearer {token}")
