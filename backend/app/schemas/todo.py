# app/schemas/todo.py
"""
Pydantic schemas for todo endpoints.
Defines request models for creation and sparse updates, and the response
shape shared by every todo endpoint.
"""
import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, field_serializer, field_validator

from app.core.timestamps import as_utc, isoformat_utc
from app.models.todo import Priority, Todo

TITLE_MAX = 255
DESCRIPTION_MAX = 1000

def _clean_title(v: str) -> str:
    v = v.strip()
    if not 1 <= len(v) <= TITLE_MAX:
        raise ValueError(f"Title must be between 1 and {TITLE_MAX} characters")
    return v

def _check_description(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) > DESCRIPTION_MAX:
        raise ValueError(f"Description must not exceed {DESCRIPTION_MAX} characters")
    return v

class TodoCreateIn(BaseModel):
    """
    Request model for creating a todo.
    Only title is required; priority defaults to medium.
    """
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.medium
    due_date: Optional[dt.datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return as_utc(v) if v is not None else None

class TodoUpdateIn(BaseModel):
    """
    Request model for a sparse update.

    Every field is optional. Which fields the client actually sent is read
    from ``model_fields_set``: an omitted field is left untouched, while an
    explicit null clears description/due_date. Title, completed and priority
    cannot be null.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[dt.datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Title must be between 1 and 255 characters")
        return _clean_title(v)

    @field_validator("completed", "priority")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return as_utc(v) if v is not None else None

    def supplied(self) -> dict[str, Any]:
        """Only the fields present in the request payload."""
        return {name: getattr(self, name) for name in self.model_fields_set}

class TodoOut(BaseModel):
    """
    Todo as returned by the API. Timestamps render as ISO-8601 UTC strings.
    """
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    priority: Priority
    due_date: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_serializer("due_date", "created_at", "updated_at")
    def serialize_timestamp(self, value: Optional[dt.datetime]) -> Optional[str]:
        return isoformat_utc(value)

    @classmethod
    def from_model(cls, todo: Todo) -> "TodoOut":
        return cls(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            completed=todo.completed,
            priority=todo.priority,
            due_date=todo.due_date,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )

class PaginationOut(BaseModel):
    page: int
    limit: int
    totalCount: int
    totalPages: int
    hasNext: bool
    hasPrev: bool
