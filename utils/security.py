"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Everything here is a free function: secrets, lifetimes and algorithms are
passed in explicitly, nothing is read from the Flask app.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """The token signature is valid but its exp claim is in the past."""


class TokenInvalidError(TokenError):
    """Bad signature, malformed token, wrong token type or missing claims."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    jti: str
    token_type: str
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2

    Mismatches and unparseable hashes return False. argon2 compares digests
    in constant time.
    """
    if not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when the hash was produced with outdated argon2 parameters."""
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHashError:
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A throwaway hash to verify against when no user matched a login."""
    return ph.hash(uuid.uuid4().hex)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_token(
    subject: str,
    secret: str,
    expires_in: timedelta,
    token_type: str,
    algorithm: str = "HS256",
    issuer: Optional[str] = None,
) -> str:
    """Sign a JWT for `subject` that expires `expires_in` from now."""
    now = _now()
    payload = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
        "type": token_type,
        "jti": generate_jti(),
    }
    if issuer:
        payload["iss"] = issuer
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    expected_type: Optional[str] = None,
    issuer: Optional[str] = None,
) -> TokenClaims:
    """
    Decode and validate a JWT.

    Raises TokenExpiredError when the token is past its exp claim and
    TokenInvalidError for everything else (signature, shape, type, issuer).
    """
    options = {"require": ["exp", "iat", "sub"]}
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options=options,
            issuer=issuer,
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalidError(f"Invalid token: {exc}") from exc

    if expected_type and decoded.get("type") != expected_type:
        raise TokenInvalidError("Wrong token type")

    subject = decoded.get("sub")
    if not subject:
        raise TokenInvalidError("Token has no subject")

    return TokenClaims(
        user_id=str(subject),
        jti=str(decoded.get("jti", "")),
        token_type=str(decoded.get("type", "")),
        issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
    )
