"""SMS and messaging adapters."""

from .twilio_adapter import (
    MessageResult,
    TwilioAdapter,
    TwilioAPIError,
    TwilioError,
    VerificationResult,
    create_twilio_adapter,
    get_twilio_adapter,
)

__all__ = [
    "TwilioAdapter",
    "MessageResult",
    "VerificationResult",
    "TwilioError",
    "TwilioAPIError",
    "create_twilio_adapter",
    "get_twilio_adapter",
]
