"""Payment gateway adapters."""

from .razorpay_adapter import (
    RazorpayAdapter,
    RazorpayAPIError,
    RazorpayError,
    RazorpayNotConfiguredError,
    RazorpayOrder,
    RazorpayRefund,
    create_razorpay_adapter,
    from_minor_units,
    get_razorpay_adapter,
    to_minor_units,
)

__all__ = [
    "RazorpayAdapter",
    "RazorpayOrder",
    "RazorpayRefund",
    "RazorpayError",
    "RazorpayAPIError",
    "RazorpayNotConfiguredError",
    "create_razorpay_adapter",
    "get_razorpay_adapter",
    "to_minor_units",
    "from_minor_units",
]
