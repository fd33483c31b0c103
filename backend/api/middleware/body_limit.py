"""
Request body size limit.

A declared Content-Length over the limit is refused before the route runs.
Bodies without one (chunked uploads) are counted as they stream in, and the
read that crosses the limit fails with 413.
"""

import logging

from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

_LIMITED_METHODS = ("POST", "PUT", "PATCH")


class BodySizeLimitMiddleware:
    """Pure ASGI middleware capping request bodies at ``max_body_size`` bytes."""

    def __init__(self, app: ASGIApp, max_body_size: int = 10 * 1024) -> None:
        self.app = app
        self.max_body_size = max_body_size
        self.message = f"Request body too large (max {max_body_size // 1024}kb)"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("method") not in _LIMITED_METHODS:
            await self.app(scope, receive, send)
            return

        content_length = _declared_length(scope)
        if content_length is not None and content_length > self.max_body_size:
            logger.warning(f"Refused {content_length}-byte body on {scope.get('path', '')}")
            response = JSONResponse(
                status_code=413, content={"status": "fail", "message": self.message}
            )
            await response(scope, receive, send)
            return

        received = 0

        async def receive_wrapper() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(f"Streamed body over limit on {scope.get('path', '')}")
                    raise HTTPException(status_code=413, detail=self.message)
            return message

        await self.app(scope, receive_wrapper, send)


def _declared_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", ()):
        if name == b"content-length":
            text = value.decode("latin-1").strip()
            return int(text) if text.isdigit() else None
    return None
