# app/models/user.py
"""
Database model for users.
Represents a registered account: login identity, credentials and the owner
of todo items.
"""
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Todos (one-to-many, via related_name="todos"); todos are
      removed together with their owner

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username and email must both be unique across all users
    """
    id = fields.IntField(pk=True)  # Primary key
    username = fields.CharField(max_length=50, unique=True, index=True)  # Login name
    email = fields.CharField(max_length=100, unique=True, index=True)  # Login email
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    created_at = fields.DatetimeField(auto_now_add=True)  # Set once on registration
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
