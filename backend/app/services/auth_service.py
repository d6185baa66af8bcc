# app/services/auth_service.py
"""
Credential verification: registration, login and profile lookup.

Login failures are deliberately uniform: an unknown email and a wrong
password produce the same Unauthenticated error, and the unknown-email
path still runs a (dummy) hash verification.
"""
import logging

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from app.core.db import Database
from app.core.errors import Conflict, NotFound, Unauthenticated
from app.core.security import Identity, create_access_token, dummy_verify, hash_password, verify_password
from app.models.user import User

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Invalid email or password"


async def register(db: Database, username: str, email: str, password: str) -> tuple[User, str]:
    """
    Create a user and issue a session token.

    Raises:
        Conflict: username or email already taken (checked before the insert;
            a concurrent insert that wins the race is reported the same way)
    """
    async with db.acquire() as conn:
        taken = await User.filter(Q(email=email) | Q(username=username)).using_db(conn).exists()
        if taken:
            raise Conflict("User already exists", "A user with this email or username already exists")
        try:
            user = await User.create(
                username=username,
                email=email,
                password_hash=hash_password(password),
                using_db=conn,
            )
        except IntegrityError:
            raise Conflict("User already exists", "A user with this email or username already exists")

    logger.info("[auth] registered user id=%s username=%s", user.id, user.username)
    return user, create_access_token(user.id)


async def login(db: Database, email: str, password: str) -> tuple[User, str]:
    """
    Verify credentials and issue a session token.

    Raises:
        Unauthenticated: unknown email or wrong password (indistinguishable)
    """
    async with db.acquire() as conn:
        user = await User.get_or_none(email=email, using_db=conn)

    if user is None:
        dummy_verify()
        logger.warning("[auth] failed login for email=%s", email)
        raise Unauthenticated("Authentication failed", INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        logger.warning("[auth] failed login for email=%s", email)
        raise Unauthenticated("Authentication failed", INVALID_CREDENTIALS)

    logger.info("[auth] login user id=%s", user.id)
    return user, create_access_token(user.id)


async def get_profile(db: Database, identity: Identity) -> User:
    """
    Load the authenticated user. The token may outlive the account, so a
    missing user is a NotFound rather than an authentication failure.
    """
    async with db.acquire() as conn:
        user = await User.get_or_none(id=identity.user_id, using_db=conn)
    if user is None:
        raise NotFound("User not found")
    return user
