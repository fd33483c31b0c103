"""
JWT token service for authentication and password reset.
"""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt


def password_fingerprint(password_hash: str) -> str:
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


@dataclass
class TokenPayload:
    """JWT token payload structure."""

    sub: str  # Subject (user ID)
    exp: datetime
    iat: datetime
    type: str  # "access" or "password_reset"
    role: str | None = None
    fingerprint: str | None = None  # password_reset only

    def issued_before(self, moment: datetime | None) -> bool:
        """True when the token predates ``moment`` (e.g. a password change)."""
        if moment is None:
            return False
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        # JWT iat has one-second resolution
        return int(self.iat.timestamp()) < int(moment.timestamp())


class TokenService:
    """Creates and validates signed JWTs."""

    ACCESS = "access"
    PASSWORD_RESET = "password_reset"

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 10080,
        password_reset_expire_minutes: int = 60,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes
        self._password_reset_expire_minutes = password_reset_expire_minutes

    def _encode(self, user_id: str, token_type: str, minutes: int, **claims) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "exp": now + timedelta(minutes=minutes),
            "iat": now,
            "type": token_type,
        }
        payload.update({k: v for k, v in claims.items() if v is not None})
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def create_access_token(self, user_id: str, role: str | None = None) -> str:
        """
        Create an access token.

        Args:
            user_id: User ID to encode in the token
            role: Optional role to include

        Returns:
            Encoded JWT access token
        """
        return self._encode(
            user_id, self.ACCESS, self._access_token_expire_minutes, role=role
        )

    def create_password_reset_token(self, user_id: str, password_hash: str) -> str:
        """Create a short-lived token emailed to the user for a password reset.

        The token is bound to the current password hash, so it stops working
        as soon as the password changes.
        """
        return self._encode(
            user_id,
            self.PASSWORD_RESET,
            self._password_reset_expire_minutes,
            pwd=password_fingerprint(password_hash),
        )

    @property
    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds, used for the auth cookie."""
        return self._access_token_expire_minutes * 60

    def decode_token(self, token: str) -> TokenPayload | None:
        """
        Decode and validate a JWT token.

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )

            for field in ("sub", "exp", "type"):
                if field not in payload:
                    raise JWTError(f"Missing required field: {field}")

            return TokenPayload(
                sub=payload["sub"],
                exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
                iat=datetime.fromtimestamp(payload.get("iat", 0), tz=UTC),
                type=payload["type"],
                role=payload.get("role"),
                fingerprint=payload.get("pwd"),
            )
        except JWTError:
            return None

    def verify_access_token(self, token: str) -> TokenPayload | None:
        payload = self.decode_token(token)
        if payload and payload.type == self.ACCESS:
            return payload
        return None

    def verify_password_reset_token(self, token: str, password_hash: str) -> bool:
        """True if ``token`` is a live reset token for the given password hash."""
        payload = self.decode_token(token)
        if not payload or payload.type != self.PASSWORD_RESET or not payload.fingerprint:
            return False
        return hmac.compare_digest(payload.fingerprint, password_fingerprint(password_hash))

    def password_reset_subject(self, token: str) -> str | None:
        """User id a reset token was issued for, without checking the binding."""
        payload = self.decode_token(token)
        if payload and payload.type == self.PASSWORD_RESET:
            return payload.sub
        return None
