"""Unit tests for password hashing and JWT tokens."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from core.security import PasswordHasher, TokenService

SECRET = "unit-test-secret-key-that-is-long-enough"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key=SECRET)


@pytest.fixture(scope="module")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    def test_hash_and_verify(self, hasher):
        hashed = hasher.hash("correct horse")
        assert hashed != "correct horse"
        assert hasher.verify("correct horse", hashed)
        assert not hasher.verify("wrong horse", hashed)

    def test_missing_hash_never_verifies(self, hasher):
        assert hasher.verify("anything", None) is False


class TestAccessTokens:
    def test_round_trip(self, tokens):
        token = tokens.create_access_token("user-1", role="customer")
        payload = tokens.verify_access_token(token)

        assert payload.sub == "user-1"
        assert payload.role == "customer"
        assert payload.type == "access"
        assert payload.exp > datetime.now(UTC)

    def test_wrong_secret(self, tokens):
        token = TokenService(secret_key="another-secret").create_access_token("user-1")
        assert tokens.verify_access_token(token) is None

    def test_expired(self):
        expired = TokenService(secret_key=SECRET, access_token_expire_minutes=-1)
        assert expired.verify_access_token(expired.create_access_token("user-1")) is None

    def test_missing_type_rejected(self, tokens):
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.now(UTC) + timedelta(minutes=5)}, SECRET
        )
        assert tokens.decode_token(token) is None

    def test_reset_token_is_not_an_access_token(self, tokens):
        token = tokens.create_password_reset_token("user-1", "hash")
        assert tokens.verify_access_token(token) is None

    def test_cookie_max_age(self):
        assert TokenService(SECRET, access_token_expire_minutes=90).access_token_max_age == 5400


class TestIssuedBefore:
    def test_none_means_never_changed(self, tokens):
        payload = tokens.verify_access_token(tokens.create_access_token("user-1"))
        assert payload.issued_before(None) is False

    def test_change_after_issue(self, tokens):
        payload = tokens.verify_access_token(tokens.create_access_token("user-1"))
        assert payload.issued_before(datetime.now(UTC) + timedelta(seconds=5))

    def test_same_second_is_not_before(self, tokens):
        payload = tokens.verify_access_token(tokens.create_access_token("user-1"))
        assert payload.issued_before(payload.iat) is False

    def test_naive_datetime_treated_as_utc(self, tokens):
        payload = tokens.verify_access_token(tokens.create_access_token("user-1"))
        earlier = (payload.iat - timedelta(minutes=1)).replace(tzinfo=None)
        assert payload.issued_before(earlier) is False


class TestPasswordResetTokens:
    def test_bound_to_password_hash(self, tokens):
        token = tokens.create_password_reset_token("user-1", "hash-v1")

        assert tokens.password_reset_subject(token) == "user-1"
        assert tokens.verify_password_reset_token(token, "hash-v1")
        assert not tokens.verify_password_reset_token(token, "hash-v2")

    def test_access_token_is_not_a_reset_token(self, tokens):
        token = tokens.create_access_token("user-1")
        assert tokens.password_reset_subject(token) is None
        assert not tokens.verify_password_reset_token(token, "hash-v1")

    def test_expired_reset_token(self):
        service = TokenService(SECRET, password_reset_expire_minutes=-1)
        token = service.create_password_reset_token("user-1", "hash-v1")
        assert not service.verify_password_reset_token(token, "hash-v1")
