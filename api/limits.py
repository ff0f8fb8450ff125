"""
Request body size limit.

Pure ASGI middleware, so oversized bodies are refused before FastAPI
reads or decodes anything:

- a declared Content-Length above the limit gets an immediate 413
- otherwise the body is buffered up to the limit; crossing it answers 413
  on the spot, and a body within the limit is replayed downstream as a
  single message
"""

import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import error_response

logger = logging.getLogger(__name__)


def too_large_reason(limit: int) -> str:
    return f"Request body exceeds limit of {limit} bytes"


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_body_bytes``."""

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        if max_body_bytes <= 0:
            raise ValueError(f"max_body_bytes must be positive, got {max_body_bytes}")
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = self._content_length(scope)
        if declared is not None and declared > self.max_body_bytes:
            logger.warning(f"Rejected {scope.get('path')}: Content-Length {declared} > {self.max_body_bytes}")
            await self._reject(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                # Client went away mid-upload; nobody to answer
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_body_bytes:
                logger.warning(f"Rejected {scope.get('path')}: streamed body over {self.max_body_bytes} bytes")
                await self._reject(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = error_response(413, too_large_reason(self.max_body_bytes))
        await response(scope, receive, send)

    @staticmethod
    def _content_length(scope: Scope):
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None
