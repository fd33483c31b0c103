"""
Security utilities for authentication and authorization.
"""

from .password import PasswordHasher, password_hasher
from .tokens import TokenPayload, TokenService

__all__ = [
    "PasswordHasher",
    "password_hasher",
    "TokenService",
    "TokenPayload",
]
