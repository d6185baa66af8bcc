# app/api/deps.py
from fastapi import Header, Request

from app.core.db import Database
from app.core.security import Identity, resolve_identity

def get_db(request: Request) -> Database:
    """
    FastAPI dependency returning the storage handle created at startup.

    Routes never reach for a global connection; they receive this handle and
    pass it to the service functions.
    """
    return request.app.state.db

async def get_identity(authorization: str | None = Header(default=None)) -> Identity:
    """
    FastAPI dependency to authenticate the request from its bearer token.

    The token is self-describing, so no database lookup happens here;
    downstream operations re-check that the user/todo they touch exists.

    Returns:
        Identity: The authenticated user id

    Raises:
        Unauthenticated (401): If no token is provided
        Forbidden (403): If the token is malformed, badly signed or expired

    Usage:
        @router.get("/protected")
        async def protected_route(identity: Identity = Depends(get_identity)):
            return {"user_id": identity.user_id}
    """
    return resolve_identity(authorization)
