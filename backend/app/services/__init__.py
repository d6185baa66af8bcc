"""
Services Module

Business operations behind the HTTP routes:
- auth_service: Registration, login and profile lookup
- todo_service: Owner-scoped todo CRUD, filtering/pagination and sparse updates
"""
from . import auth_service, todo_service

__all__ = [
    "auth_service",
    "todo_service",
]
