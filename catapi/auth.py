"""
Cat API — Credentials, Bearer Tokens and Authorization Rules
==============================================================

What:  Password hashing, JWT issuing/validation, FastAPI identity
       dependencies and the owner/admin authorization rules.
How:   argon2-cffi hashes passwords (a fresh random salt per hash, encoded
       into the hash string); PyJWT signs HS256 access tokens whose claims
       are decoded once per request into an immutable Identity.
Who:   Routes depend on `require_identity` / `optional_identity`; services
       call `ensure_owner` / `ensure_admin` before mutating cats.

Authorization rules:
    Owner-only:   caller.id must equal the cat's stored owner id.
    Fixed-admin:  caller.email must equal settings.admin_email, literally.
                  The role claim is carried but never consulted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Header

from catapi.config import settings
from catapi.exceptions import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

_password_hasher = PasswordHasher()


# ══════════════════════════════════════════════════════════════════════════
# Credential Hashing
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    """Hash a password with Argon2id. Each call draws a new random salt."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a stored hash. Malformed hashes never match."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# ══════════════════════════════════════════════════════════════════════════
# Identity & Tokens
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Identity:
    """The authenticated caller, built once from the token claims."""

    id: str
    email: str
    role: str
    user_name: str


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    user_name: str,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed JWT access token for the given account."""
    issued = now or datetime.now(timezone.utc)
    expires = issued + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "user_name": user_name,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    """
    Decode and validate a JWT access token.

    Raises:
        AuthenticationError: bad signature, expired, or missing claims.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise AuthenticationError("Invalid token")

    return Identity(
        id=user_id,
        email=email,
        role=payload.get("role", "user"),
        user_name=payload.get("user_name", ""),
    )


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


# ── FastAPI Dependencies ──────────────────────────────────────────────────

async def require_identity(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Identity:
    """Dependency for bearer-required routes. Missing or bad token → 401."""
    token = _extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError("Unauthorized")
    return decode_access_token(token)


async def optional_identity(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Optional[Identity]:
    """Dependency that yields None instead of failing when no valid token is sent."""
    token = _extract_bearer_token(authorization)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except AuthenticationError as exc:
        logger.info("Ignoring unusable bearer token: %s", exc.message)
        return None


# ══════════════════════════════════════════════════════════════════════════
# Authorization Rules
# ══════════════════════════════════════════════════════════════════════════

def is_admin(identity: Identity) -> bool:
    return identity.email == settings.admin_email


def ensure_admin(identity: Identity) -> None:
    """Raise ForbiddenError unless the caller is the fixed admin account."""
    if not is_admin(identity):
        logger.warning("Admin-only action refused for user %s", identity.id)
        raise ForbiddenError("Admin only", context={"user_id": identity.id})


def ensure_owner(identity: Identity, owner_id: str) -> None:
    """Raise ForbiddenError unless the caller owns the record."""
    if identity.id != owner_id:
        logger.warning(
            "Owner-only action refused: user %s is not owner %s", identity.id, owner_id
        )
        raise ForbiddenError(
            "Owner only",
            context={"user_id": identity.id, "owner_id": owner_id},
        )
