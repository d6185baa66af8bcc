# app/models/todo.py
"""
Database model for todo items.
Each todo belongs to exactly one user and is deleted with its owner.
"""
from enum import Enum

from tortoise import fields, models

class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

class Todo(models.Model):
    """
    Todo database model.

    Relationships:
    - Belongs to a User (many-to-one); cascade delete with the owner

    Timestamps:
    - created_at is set on insert
    - updated_at is set on insert and refreshed by every mutating write
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="todos",
        on_delete=fields.CASCADE,
    )  # Owner; every read/write is filtered by user_id
    title = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    completed = fields.BooleanField(default=False, index=True)
    priority = fields.CharEnumField(Priority, max_length=20, default=Priority.medium, index=True)
    due_date = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "todos"  # Database table name
