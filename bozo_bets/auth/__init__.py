"""
Authentication module.

Provides password policy, bcrypt hashing and persisted JWT sessions,
plus password reset and team invitation tokens.
"""

from .passwords import PasswordCheck, hash_password, validate_password, verify_password
from .sessions import AuthManager

__all__ = [
    "AuthManager",
    "PasswordCheck",
    "hash_password",
    "validate_password",
    "verify_password",
]
