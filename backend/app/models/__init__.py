# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Todo: Todo item owned by a User
- Priority: Allowed todo priorities
"""
from .user import User
from .todo import Todo, Priority
