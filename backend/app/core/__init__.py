# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and the bounded connection handle
- errors: Error taxonomy and JSON error handlers
- security: Password hashing, session tokens and bearer authentication
- timestamps: Server clock and canonical timestamp format
"""
