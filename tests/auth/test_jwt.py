"""Tests for access token handling."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from fincomm.auth.jwt import create_access_token, verify_token
from fincomm.config import get_settings

SECRET = "unit-test-secret-with-enough-length-0123"


@pytest.fixture(autouse=True)
def _secret(monkeypatch):
    monkeypatch.setenv("FINCOMM_JWT_SECRET", SECRET)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token(user_id=7, role="admin")
        payload = verify_token(token)
        assert payload["sub"] == "7"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"
        assert payload["iss"] == "fincomm"

    def test_wrong_type_rejected(self):
        token = create_access_token(user_id=1)
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token, expected_type="refresh")

    def test_expired_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "1", "type": "access", "iss": "fincomm", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": "1", "type": "access", "iss": "fincomm"}, "some-other-secret-0123456789abcdef", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_wrong_issuer_rejected(self):
        token = jwt.encode({"sub": "1", "type": "access", "iss": "elsewhere"}, SECRET, algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)
