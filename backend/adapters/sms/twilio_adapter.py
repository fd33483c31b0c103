"""
Twilio messaging adapter.

Sends SMS and WhatsApp messages through the Twilio SDK and drives the
Verify service for phone-number confirmation. In development, or when no
credentials are configured, messages are logged instead of sent.
"""

import asyncio
import logging
import re
import secrets
from dataclasses import dataclass

from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

_CODE_PATTERN = re.compile(r"^\d{6}$")


class TwilioError(Exception):
    """Base exception for Twilio adapter errors."""

    pass


class TwilioAPIError(TwilioError):
    """Raised when the Twilio API rejects a request."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class MessageResult:
    """Outcome of a send; ``sid`` is a placeholder when nothing was sent."""

    sid: str
    status: str
    to: str | None = None

    @classmethod
    def from_instance(cls, message) -> "MessageResult":
        return cls(
            sid=getattr(message, "sid", "") or "",
            status=str(getattr(message, "status", "") or ""),
            to=getattr(message, "to", None),
        )


@dataclass
class VerificationResult:
    status: str  # pending, approved, canceled
    sid: str | None = None

    @property
    def approved(self) -> bool:
        return self.status == "approved"

    @classmethod
    def from_instance(cls, verification) -> "VerificationResult":
        return cls(
            status=str(getattr(verification, "status", "") or ""),
            sid=getattr(verification, "sid", None),
        )


class TwilioAdapter:
    """Async wrapper around the Twilio SDK for SMS, WhatsApp and Verify."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        verify_service_sid: str | None = None,
        dry_run: bool | None = None,
        timeout: float = 15.0,
    ):
        """
        Initialize Twilio adapter.

        Args:
            account_sid: Account SID (defaults to settings)
            auth_token: Auth token (defaults to settings)
            from_number: Sender number in E.164 form (defaults to settings)
            verify_service_sid: Verify service SID (defaults to settings)
            dry_run: Log instead of sending (defaults to True in development)
            timeout: HTTP timeout in seconds
        """
        self.account_sid = account_sid if account_sid is not None else settings.twilio_account_sid
        self.auth_token = auth_token if auth_token is not None else settings.twilio_auth_token
        self.from_number = from_number if from_number is not None else settings.twilio_phone_number
        self.verify_service_sid = (
            verify_service_sid
            if verify_service_sid is not None
            else settings.twilio_verify_service_sid
        )
        self.dry_run = settings.is_development if dry_run is None else dry_run
        self.timeout = timeout
        self._client: Client | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    @property
    def _sends(self) -> bool:
        return self.is_configured and not self.dry_run

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout),
            )
        return self._client

    async def close(self):
        if self._client:
            session = getattr(self._client.http_client, "session", None)
            if session is not None:
                session.close()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _call(self, func, **kwargs):
        """Run a blocking SDK call in a worker thread."""
        try:
            return await asyncio.to_thread(func, **kwargs)
        except TwilioRestException as e:
            message = e.msg or str(e)
            logger.error(f"Twilio API error: {message}")
            raise TwilioAPIError(message, status_code=e.status or 500)

    async def _create_message(self, to: str, body: str, channel: str) -> MessageResult:
        if not self._sends:
            reason = "dry run" if self.is_configured else "Twilio not configured"
            logger.info(f"{channel} to {to} ({reason}): {body}")
            return MessageResult(
                sid="test_sid" if self.is_configured else "no_client",
                status="sent" if self.is_configured else "skipped",
                to=to,
            )

        prefix = "whatsapp:" if channel == "WhatsApp" else ""
        message = await self._call(
            self._get_client().messages.create,
            to=f"{prefix}{to}",
            from_=f"{prefix}{self.from_number}",
            body=body,
        )
        logger.info(f"{channel} sent to {to}")
        return MessageResult.from_instance(message)

    async def send_sms(self, to: str, body: str) -> MessageResult:
        """
        Send an SMS.

        Raises:
            TwilioAPIError: If Twilio rejects the message
        """
        return await self._create_message(to, body, "SMS")

    async def send_whatsapp(self, to: str, body: str) -> MessageResult:
        return await self._create_message(to, body, "WhatsApp")

    def _verify_service(self):
        return self._get_client().verify.v2.services(self.verify_service_sid)

    async def send_verification_code(self, phone_number: str) -> VerificationResult:
        """Start a Verify SMS challenge for ``phone_number``."""
        if not self._sends or not self.verify_service_sid:
            code = f"{secrets.randbelow(900000) + 100000}"
            logger.info(f"Verification code for {phone_number} (not sent): {code}")
            return VerificationResult(status="pending", sid="test_verification_sid")

        verification = await self._call(
            self._verify_service().verifications.create, to=phone_number, channel="sms"
        )
        return VerificationResult.from_instance(verification)

    async def check_verification_code(self, phone_number: str, code: str) -> VerificationResult:
        """
        Check a Verify code.

        Without live credentials any six-digit code is approved.
        """
        if not self._sends or not self.verify_service_sid:
            if _CODE_PATTERN.match(code or ""):
                return VerificationResult(status="approved")
            return VerificationResult(status="pending")

        check = await self._call(
            self._verify_service().verification_checks.create, to=phone_number, code=code
        )
        return VerificationResult.from_instance(check)


def create_twilio_adapter(**kwargs) -> TwilioAdapter:
    return TwilioAdapter(**kwargs)


_adapter: TwilioAdapter | None = None


def get_twilio_adapter() -> TwilioAdapter:
    """Process-wide adapter, created on first use."""
    global _adapter
    if _adapter is None:
        _adapter = create_twilio_adapter()
    return _adapter
