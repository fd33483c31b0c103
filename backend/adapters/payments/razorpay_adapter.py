"""
Razorpay payment gateway adapter.

Wraps the Razorpay SDK calls the delivery service needs (order creation
and refunds) plus checkout signature verification. When no API
credentials are configured, orders are simulated so the checkout flow can
be exercised locally.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import razorpay
from razorpay.errors import (
    BadRequestError,
    GatewayError,
    ServerError,
    SignatureVerificationError,
)

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


class RazorpayError(Exception):
    """Base exception for Razorpay adapter errors."""

    pass


class RazorpayNotConfiguredError(RazorpayError):
    """Raised when an operation needs credentials that are not set."""

    pass


class RazorpayAPIError(RazorpayError):
    """Raised when the Razorpay API returns an error."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def to_minor_units(amount: float) -> int:
    """Convert rupees to paise."""
    return int(round(float(amount) * 100))


def from_minor_units(amount: int | None) -> float | None:
    if amount is None:
        return None
    return amount / 100


@dataclass
class RazorpayOrder:
    """A gateway order awaiting checkout."""

    id: str
    amount: int  # paise
    currency: str
    receipt: str
    status: str = "created"
    notes: dict[str, Any] = field(default_factory=dict)
    created_at: int | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RazorpayOrder":
        notes = data.get("notes") or {}
        return cls(
            id=data.get("id", ""),
            amount=int(data.get("amount", 0)),
            currency=data.get("currency", ""),
            receipt=data.get("receipt", ""),
            status=data.get("status", "created"),
            notes=notes if isinstance(notes, dict) else {},
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "receipt": self.receipt,
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at,
        }


@dataclass
class RazorpayRefund:
    """A refund issued against a captured payment."""

    id: str
    payment_id: str
    amount: int  # paise
    currency: str
    status: str
    speed_processed: str | None = None
    receipt: str | None = None
    created_at: int | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RazorpayRefund":
        return cls(
            id=data.get("id", ""),
            payment_id=data.get("payment_id", ""),
            amount=int(data.get("amount", 0)),
            currency=data.get("currency", ""),
            status=data.get("status", ""),
            speed_processed=data.get("speed_processed"),
            receipt=data.get("receipt"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "payment_id": self.payment_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "speed_processed": self.speed_processed,
            "receipt": self.receipt,
            "created_at": self.created_at,
        }


class RazorpayAdapter:
    """
    Async wrapper around the Razorpay Python SDK.

    The SDK is synchronous, so gateway calls run in a worker thread. The
    SDK client is created on first use and reused for the lifetime of the
    adapter.
    """

    MOCK_KEY = "test_key"

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        currency: str | None = None,
        timeout: float = 30.0,
    ):
        """
        Initialize Razorpay adapter.

        Args:
            key_id: API key id (defaults to settings)
            key_secret: API key secret (defaults to settings)
            currency: ISO currency for new orders (defaults to settings)
            timeout: Seconds to wait for a gateway call
        """
        self.key_id = key_id if key_id is not None else settings.razorpay_key_id
        self.key_secret = key_secret if key_secret is not None else settings.razorpay_key_secret
        self.currency = currency or settings.payment_currency
        self.timeout = timeout
        self._client: razorpay.Client | None = None

        if not self.is_configured:
            logger.warning(
                "Razorpay credentials not configured. Orders will be simulated."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    @property
    def public_key(self) -> str:
        """Key id handed to the checkout client."""
        return self.key_id if self.is_configured else self.MOCK_KEY

    def _sdk(self) -> razorpay.Client:
        if self._client is None:
            self._client = razorpay.Client(auth=(self.key_id or "", self.key_secret or ""))
            self._client.set_app_details(
                {"title": settings.app_name, "version": settings.app_version}
            )
        return self._client

    def _get_client(self) -> razorpay.Client:
        """SDK client for gateway calls; requires credentials."""
        if not self.is_configured:
            raise RazorpayNotConfiguredError("Payment gateway is not configured")
        return self._sdk()

    async def close(self):
        """Release the SDK's HTTP session."""
        if self._client:
            session = getattr(self._client, "session", None)
            if session is not None:
                session.close()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _call(self, operation: str, func, *args, **kwargs) -> dict[str, Any]:
        """
        Run a blocking SDK call in a worker thread.

        Raises:
            RazorpayAPIError: If the gateway rejects the call or times out
        """
        try:
            logger.info(f"Razorpay {operation}")
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs), timeout=self.timeout
            )
        except BadRequestError as e:
            logger.error(f"Razorpay rejected {operation}: {e}")
            raise RazorpayAPIError(str(e) or "Bad request", status_code=400)
        except GatewayError as e:
            logger.error(f"Razorpay gateway error during {operation}: {e}")
            raise RazorpayAPIError(str(e) or "Gateway error", status_code=502)
        except ServerError as e:
            logger.error(f"Razorpay server error during {operation}: {e}")
            raise RazorpayAPIError(str(e) or "Server error", status_code=500)
        except asyncio.TimeoutError:
            logger.error(f"Razorpay {operation} timed out after {self.timeout}s")
            raise RazorpayAPIError("Payment gateway timed out", status_code=504)

    async def create_order(
        self,
        amount: int,
        receipt: str,
        notes: dict[str, Any] | None = None,
    ) -> RazorpayOrder:
        """
        Create an auto-captured order.

        Args:
            amount: Amount in paise
            receipt: Merchant receipt reference
            notes: Free-form key/value notes stored with the order

        Returns:
            The created order, or a simulated one when unconfigured
        """
        if not self.is_configured:
            order = RazorpayOrder(
                id=f"order_test_{int(time.time() * 1000)}",
                amount=amount,
                currency=self.currency,
                receipt=receipt,
                notes=notes or {},
                created_at=int(time.time()),
            )
            logger.info(f"Mock Razorpay order created: {order.id}")
            return order

        client = self._get_client()
        data = await self._call(
            "order create",
            client.order.create,
            data={
                "amount": amount,
                "currency": self.currency,
                "receipt": receipt,
                "payment_capture": 1,
                "notes": notes or {},
            },
        )
        order = RazorpayOrder.from_api_response(data)
        logger.info(f"Created Razorpay order {order.id} for receipt {receipt}")
        return order

    async def refund_payment(
        self,
        payment_id: str,
        amount: int | None = None,
        notes: dict[str, Any] | None = None,
        speed: str = "normal",
    ) -> RazorpayRefund:
        """
        Refund a captured payment.

        Args:
            payment_id: Gateway payment id
            amount: Amount in paise; omit for a full refund
            notes: Notes stored with the refund
            speed: "normal" or "optimum"

        Raises:
            RazorpayNotConfiguredError: If credentials are missing
            RazorpayAPIError: If the gateway rejects the refund
        """
        client = self._get_client()
        body: dict[str, Any] = {"speed": speed, "notes": notes or {}}
        if amount is not None:
            body["amount"] = amount

        data = await self._call("payment refund", client.payment.refund, payment_id, body)
        refund = RazorpayRefund.from_api_response(data)
        logger.info(f"Refund {refund.id} issued for payment {payment_id}")
        return refund

    def verify_payment_signature(
        self, order_id: str, payment_id: str, signature: str
    ) -> bool:
        """Check the checkout signature with the SDK's constant-time HMAC check."""
        try:
            self._sdk().utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature or "",
                }
            )
        except SignatureVerificationError:
            logger.warning(f"Payment signature verification failed for order {order_id}")
            return False
        return True


def create_razorpay_adapter(
    key_id: str | None = None,
    key_secret: str | None = None,
    currency: str | None = None,
) -> RazorpayAdapter:
    return RazorpayAdapter(key_id=key_id, key_secret=key_secret, currency=currency)


_adapter: RazorpayAdapter | None = None


def get_razorpay_adapter() -> RazorpayAdapter:
    """Process-wide adapter, created on first use. Usable as a FastAPI dependency."""
    global _adapter
    if _adapter is None:
        _adapter = create_razorpay_adapter()
    return _adapter
