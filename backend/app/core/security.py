# app/core/security.py
"""
Security module for authentication.
Handles password hashing, JWT session tokens, and resolving an
Authorization header into an authenticated identity.
"""
import datetime as dt
from dataclasses import dataclass
from typing import Optional

import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import settings
from app.core.errors import Forbidden, Unauthenticated

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# JWT configuration
JWT_SECRET = settings.jwt_secret  # Secret key for JWT signing (use strong secret in production)
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes  # Token lifetime, 24h by default
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)


@dataclass(frozen=True)
class Identity:
    """Authenticated requester, derived from a verified session token."""
    user_id: int


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.
    The comparison is constant-time (delegated to passlib).

    Args:
        plain: Plain text password to verify
        hashed: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)

def dummy_verify() -> None:
    """Spend the same time as a real verification when there is no stored hash."""
    pwd_context.dummy_verify()

def create_access_token(user_id: int) -> str:
    """
    Create a signed session token bound to a user.

    The token is self-describing: it carries the user id so requests can be
    authenticated without a database lookup.

    Token payload includes:
        - sub: Subject (user ID, as a string)
        - iat: Issued at timestamp
        - exp: Expiration timestamp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)

def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG], options={"require": ["sub", "exp"]})

def resolve_identity(authorization: Optional[str]) -> Identity:
    """
    Turn a raw Authorization header into an Identity.

    A missing credential and a bad credential are reported differently:
        - no header, or "Bearer" without a token -> Unauthenticated (401)
        - wrong scheme, bad signature, malformed or expired token -> Forbidden (403)
    """
    parts = (authorization or "").split(None, 1)
    if len(parts) < 2 or not parts[1].strip():
        raise Unauthenticated(message="No token provided")

    scheme, token = parts[0], parts[1].strip()
    if scheme.lower() != "bearer":
        raise Forbidden(message="Invalid or expired token")

    try:
        payload = decode_access_token(token)
        return Identity(user_id=int(payload["sub"]))
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        raise Forbidden(message="Invalid or expired token")
