"""
Password hashing utilities using bcrypt.
"""

from passlib.context import CryptContext

# Compared against when the account is unknown so login timing stays uniform
_DUMMY_HASH = "$2b$12$WmDNGEj9s7YLV5sV/N7aBOpWL0.T5.R5ZQOeKHNlLB.d7WN4HFXIC"


class PasswordHasher:
    """Password hashing and verification using bcrypt."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str | None) -> bool:
        """
        Verify a password against a hash.

        A missing hash still costs one bcrypt comparison and returns False.
        """
        if not hashed_password:
            self._context.verify(plain_password, _DUMMY_HASH)
            return False
        return self._context.verify(plain_password, hashed_password)


password_hasher = PasswordHasher()
