"""
Cat API — Credentials and Authorization Rule Tests
====================================================

What we test:
    ✅ Password hashing: verifies the right password only, salted per hash
    ✅ Token round trip, expiry and tampering
    ✅ Bearer header parsing in the FastAPI dependencies
    ✅ Owner rule and the email-based admin rule (role is ignored)
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from catapi.auth import (
    Identity,
    create_access_token,
    decode_access_token,
    ensure_admin,
    ensure_owner,
    hash_password,
    is_admin,
    optional_identity,
    require_identity,
    verify_password,
)
from catapi.config import settings
from catapi.exceptions import AuthenticationError, ForbiddenError


class TestPasswordHashing:

    def test_hash_verifies_original_password(self):
        hashed = hash_password("secret")
        assert verify_password("secret", hashed)

    def test_hash_rejects_other_password(self):
        hashed = hash_password("secret")
        assert not verify_password("Secret", hashed)
        assert not verify_password("", hashed)

    def test_hash_is_not_plaintext(self):
        assert "secret" not in hash_password("secret")

    def test_same_password_gives_different_hashes(self):
        """Each hash carries its own random salt."""
        first = hash_password("secret")
        second = hash_password("secret")
        assert first != second
        assert verify_password("secret", first)
        assert verify_password("secret", second)

    def test_malformed_hash_never_matches(self):
        assert not verify_password("secret", "not-a-hash")


class TestTokens:

    def test_round_trip(self):
        token = create_access_token("u-1", "alice@metropolia.fi", "user", "alice")
        identity = decode_access_token(token)
        assert identity == Identity(
            id="u-1", email="alice@metropolia.fi", role="user", user_name="alice"
        )

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(
            minutes=settings.jwt_access_ttl_minutes + 5
        )
        token = create_access_token("u-1", "alice@metropolia.fi", "user", "alice", now=issued)
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Token expired"

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "u-1", "email": "alice@metropolia.fi"},
            "another-secret-that-is-long-enough-000000",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Invalid token"

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.jwt")

    def test_missing_claims(self):
        token = jwt.encode({"role": "user"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


class TestIdentityDependencies:

    @pytest.mark.asyncio
    async def test_require_identity_accepts_bearer(self):
        token = create_access_token("u-1", "alice@metropolia.fi", "user", "alice")
        identity = await require_identity(authorization=f"Bearer {token}")
        assert identity.id == "u-1"

    @pytest.mark.asyncio
    async def test_require_identity_scheme_is_case_insensitive(self):
        token = create_access_token("u-1", "alice@metropolia.fi", "user", "alice")
        identity = await require_identity(authorization=f"bearer {token}")
        assert identity.email == "alice@metropolia.fi"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc"])
    async def test_require_identity_rejects_missing_token(self, header):
        with pytest.raises(AuthenticationError):
            await require_identity(authorization=header)

    @pytest.mark.asyncio
    async def test_optional_identity_returns_none_for_bad_token(self):
        assert await optional_identity(authorization="Bearer junk") is None
        assert await optional_identity(authorization=None) is None


class TestAuthorizationRules:

    def test_owner_passes(self):
        ensure_owner(Identity("u-1", "alice@metropolia.fi", "user", "alice"), "u-1")

    def test_non_owner_refused(self):
        with pytest.raises(ForbiddenError) as exc_info:
            ensure_owner(Identity("u-2", "bob@metropolia.fi", "user", "bob"), "u-1")
        assert exc_info.value.message == "Owner only"

    def test_admin_is_decided_by_email(self):
        admin = Identity("a-1", settings.admin_email, "user", "admin")
        assert is_admin(admin)
        ensure_admin(admin)

    def test_admin_role_alone_is_not_enough(self):
        impostor = Identity("u-9", "mallory@metropolia.fi", "admin", "mallory")
        assert not is_admin(impostor)
        with pytest.raises(ForbiddenError) as exc_info:
            ensure_admin(impostor)
        assert exc_info.value.message == "Admin only"

    def test_admin_email_comparison_is_literal(self):
        assert not is_admin(Identity("a-1", settings.admin_email.upper(), "user", "admin"))
