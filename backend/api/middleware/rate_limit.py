"""
Rate limiting using slowapi.

Limits are keyed on the client IP. Auth endpoints carry their own, tighter
limits through ``@limiter.limit``; everything else shares the default.

Rate Limits:
- Login: 5 attempts per minute
- Signup: 3 attempts per minute
- Forgot password: 3 attempts per hour
- Default: 100 requests per minute
"""

import ipaddress
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


def _public_ip(value: str) -> str | None:
    """Return ``value`` if it parses as a public IP address."""
    try:
        addr = ipaddress.ip_address(value.strip())
    except ValueError:
        return None
    if addr.is_private or addr.is_loopback or addr.is_link_local:
        # Spoofable; a client could claim 127.0.0.1 to escape its bucket
        return None
    return str(addr)


def client_ip(request: Request) -> str:
    """Client IP from proxy headers, falling back to the socket address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = _public_ip(forwarded.split(",")[0])
        if candidate:
            return candidate
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        candidate = _public_ip(real_ip)
        if candidate:
            return candidate
    return get_remote_address(request)


RATE_LIMITS = {
    "login": "5/minute",
    "signup": "3/minute",
    "forgot_password": "3/hour",
    "default": "100/minute",
}

if settings.rate_limit_storage_uri.startswith("memory://") and settings.is_production:
    logger.warning(
        "Rate limiter using in-memory storage; limits are per worker process"
    )

limiter = Limiter(
    key_func=client_ip,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[RATE_LIMITS["default"]],
)


def get_rate_limit(endpoint: str) -> str:
    """
    Rate limit string for an endpoint identifier.

    >>> get_rate_limit("login")
    '5/minute'
    >>> get_rate_limit("unknown")
    '100/minute'
    """
    return RATE_LIMITS.get(endpoint, RATE_LIMITS["default"])
