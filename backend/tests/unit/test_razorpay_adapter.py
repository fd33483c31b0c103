"""
Unit tests for the Razorpay adapter.

Covers simulated orders, amount conversion, checkout signature
verification, and the SDK calls made when credentials are present.
"""

import hashlib
import hmac
from unittest.mock import MagicMock, patch

import pytest
from razorpay.errors import BadRequestError, GatewayError

from adapters.payments.razorpay_adapter import (
    RazorpayAdapter,
    RazorpayAPIError,
    RazorpayNotConfiguredError,
    from_minor_units,
    to_minor_units,
)


@pytest.fixture
def mock_adapter():
    return RazorpayAdapter(key_id="", key_secret="test_secret", currency="INR")


@pytest.fixture
def live_adapter():
    return RazorpayAdapter(key_id="rzp_test_abc", key_secret="live_secret", currency="INR")


@pytest.fixture
def sdk_client():
    """Stand-in for ``razorpay.Client``."""
    return MagicMock()


class TestAmounts:
    @pytest.mark.parametrize(
        "rupees, paise", [(300, 30000), (120.5, 12050), (0.1, 10), (19.99, 1999)]
    )
    def test_to_minor_units(self, rupees, paise):
        assert to_minor_units(rupees) == paise

    def test_from_minor_units(self):
        assert from_minor_units(30000) == 300
        assert from_minor_units(None) is None


class TestUnconfigured:
    def test_public_key_placeholder(self, mock_adapter):
        assert not mock_adapter.is_configured
        assert mock_adapter.public_key == "test_key"

    async def test_mock_order(self, mock_adapter):
        order = await mock_adapter.create_order(30000, "receipt_sub-1", {"plan": "monthly"})

        assert order.id.startswith("order_test_")
        assert order.amount == 30000
        assert order.currency == "INR"
        assert order.receipt == "receipt_sub-1"
        assert order.notes == {"plan": "monthly"}

    async def test_refund_requires_credentials(self, mock_adapter):
        with pytest.raises(RazorpayNotConfiguredError):
            await mock_adapter.refund_payment("pay_1")


class TestSignature:
    def test_valid(self, mock_adapter):
        signature = hmac.new(b"test_secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        assert mock_adapter.verify_payment_signature("order_1", "pay_1", signature)

    def test_swapped_ids(self, mock_adapter):
        signature = hmac.new(b"test_secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        assert not mock_adapter.verify_payment_signature("pay_1", "order_1", signature)

    def test_wrong_secret(self, mock_adapter):
        signature = hmac.new(b"other", b"order_1|pay_1", hashlib.sha256).hexdigest()
        assert not mock_adapter.verify_payment_signature("order_1", "pay_1", signature)

    def test_empty(self, mock_adapter):
        assert not mock_adapter.verify_payment_signature("order_1", "pay_1", "")


class TestLiveCalls:
    async def test_create_order(self, live_adapter, sdk_client):
        sdk_client.order.create.return_value = {
            "id": "order_Abc123",
            "amount": 85000,
            "currency": "INR",
            "receipt": "receipt_sub-1",
            "status": "created",
            "notes": {"plan": "quarterly"},
            "created_at": 1700000000,
        }

        with patch.object(live_adapter, "_get_client", return_value=sdk_client):
            order = await live_adapter.create_order(85000, "receipt_sub-1", {"plan": "quarterly"})

        assert order.id == "order_Abc123"
        assert order.to_dict()["amount"] == 85000
        body = sdk_client.order.create.call_args.kwargs["data"]
        assert body["payment_capture"] == 1
        assert body["currency"] == "INR"
        assert body["notes"] == {"plan": "quarterly"}

    async def test_partial_refund(self, live_adapter, sdk_client):
        sdk_client.payment.refund.return_value = {
            "id": "rfnd_1",
            "payment_id": "pay_1",
            "amount": 12050,
            "currency": "INR",
            "status": "processed",
        }

        with patch.object(live_adapter, "_get_client", return_value=sdk_client):
            refund = await live_adapter.refund_payment("pay_1", amount=12050, notes={"reason": "x"})

        assert refund.id == "rfnd_1"
        assert refund.status == "processed"
        payment_id, body = sdk_client.payment.refund.call_args.args
        assert payment_id == "pay_1"
        assert body == {"speed": "normal", "notes": {"reason": "x"}, "amount": 12050}

    async def test_full_refund_omits_amount(self, live_adapter, sdk_client):
        sdk_client.payment.refund.return_value = {"id": "rfnd_2", "payment_id": "pay_1"}

        with patch.object(live_adapter, "_get_client", return_value=sdk_client):
            await live_adapter.refund_payment("pay_1")

        assert "amount" not in sdk_client.payment.refund.call_args.args[1]

    async def test_bad_request(self, live_adapter, sdk_client):
        sdk_client.order.create.side_effect = BadRequestError("The amount is invalid")

        with patch.object(live_adapter, "_get_client", return_value=sdk_client):
            with pytest.raises(RazorpayAPIError) as exc_info:
                await live_adapter.create_order(0, "receipt_sub-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "The amount is invalid"

    async def test_gateway_error(self, live_adapter, sdk_client):
        sdk_client.payment.refund.side_effect = GatewayError("Bank unavailable")

        with patch.object(live_adapter, "_get_client", return_value=sdk_client):
            with pytest.raises(RazorpayAPIError) as exc_info:
                await live_adapter.refund_payment("pay_1")

        assert exc_info.value.status_code == 502

    async def test_close_releases_session(self, live_adapter):
        client = live_adapter._get_client()
        with patch.object(client, "session") as session:
            await live_adapter.close()

        session.close.assert_called_once()
        assert live_adapter._client is None
