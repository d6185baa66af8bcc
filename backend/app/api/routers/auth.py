# app/api/routers/auth.py
from fastapi import APIRouter, Depends, status

from app.api.deps import get_db, get_identity
from app.core.db import Database
from app.core.security import Identity
from app.schemas.auth import LoginIn, RegisterIn, UserOut
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, db: Database = Depends(get_db)):
    """
    Register a new user account.

    Creates the account and returns a session token so the client is signed
    in straight away. Username and email must both be unused.

    Returns:
        dict: {message, user: {id, username, email, createdAt}, token}

    Raises:
        400: Invalid username/email/password
        409: Username or email already registered
    """
    user, token = await auth_service.register(db, body.username, body.email, body.password)
    return {
        "message": "User registered successfully",
        "user": UserOut.from_model(user).model_dump(),
        "token": token,
    }

@router.post("/login")
async def login(body: LoginIn, db: Database = Depends(get_db)):
    """
    Authenticate with email and password.

    Returns:
        dict: {message, user, token}

    Raises:
        400: Malformed email or empty password
        401: Unknown email or wrong password (same response for both)
    """
    user, token = await auth_service.login(db, body.email, body.password)
    return {
        "message": "Login successful",
        "user": UserOut.from_model(user).model_dump(),
        "token": token,
    }

@router.get("/profile")
async def profile(identity: Identity = Depends(get_identity), db: Database = Depends(get_db)):
    """
    Get the authenticated user's profile.

    Raises:
        401: No token
        403: Invalid or expired token
        404: The token's user no longer exists
    """
    user = await auth_service.get_profile(db, identity)
    return {"user": UserOut.from_model(user).model_dump()}
