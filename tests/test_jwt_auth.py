"""Unit tests for JWTAuth (bcrypt hashing + bearer tokens)."""

import pytest
from bson import ObjectId

from common.auth import JWTAuth


@pytest.fixture
def auth():
    return JWTAuth(secret="test-secret", access_token_expire_minutes=5)


class TestPasswords:
    def test_hash_and_verify(self, auth):
        hashed = auth.hash_password("S3cure!pass")

        assert hashed != "S3cure!pass"
        assert auth.verify_password("S3cure!pass", hashed) is True
        assert auth.verify_password("wrong", hashed) is False

    def test_long_passwords_are_not_truncated(self, auth):
        base = "A1!" + "x" * 80
        hashed = auth.hash_password(base + "a")
        assert auth.verify_password(base + "b", hashed) is False

    def test_empty_or_malformed_hash_fails(self, auth):
        assert auth.verify_password("anything", "") is False
        assert auth.verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    @pytest.mark.asyncio
    async def test_round_trip_claims(self, auth):
        user_id = str(ObjectId())
        token = await auth.create_token(user_id, role="admin")

        claims = await auth.verify_token(token)

        assert claims["sub"] == user_id
        assert claims["role"] == "admin"

    @pytest.mark.asyncio
    async def test_wrong_secret_rejected(self, auth):
        token = await JWTAuth(secret="other-secret").create_token("abc")

        with pytest.raises(ValueError):
            await auth.verify_token(token)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self):
        expired = JWTAuth(secret="test-secret", access_token_expire_minutes=-1)
        token = await expired.create_token("abc")

        with pytest.raises(ValueError):
            await expired.verify_token(token)
