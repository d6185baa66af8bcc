# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for registration/login and the public user shape.
"""
import re

from pydantic import BaseModel, EmailStr, field_validator

from app.core.timestamps import isoformat_utc
from app.models.user import User

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

class RegisterIn(BaseModel):
    """
    Request model for user registration.
    Username 3-50 chars of letters/digits/underscore; password at least 6
    chars with a lowercase letter, an uppercase letter and a digit.
    """
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not 3 <= len(v) <= 50:
            raise ValueError("Username must be between 3 and 50 characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one number"
            )
        return v

class LoginIn(BaseModel):
    """
    Request model for user login endpoint.
    """
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v

class UserOut(BaseModel):
    """
    User information returned by auth endpoints (never includes the hash).
    """
    id: int
    username: str
    email: str
    createdAt: str

    @classmethod
    def from_model(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            createdAt=isoformat_utc(user.created_at),
        )
