"""
Request fault boundary.

Pure ASGI middleware around every route handler. Whatever a handler
raises, synchronously or from an awaited operation, is handed to the
FaultTranslator exactly once.

A fault raised after the response has started cannot be translated; it
is logged and re-raised so the server aborts the connection. Nothing is
swallowed.
"""

import logging

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from faultline.shared.errors.handlers import FaultTranslator, request_path

logger = logging.getLogger(__name__)


class AsyncBoundaryMiddleware:
    """Forwards unhandled request faults to the translator.

    Args:
        app: The wrapped ASGI application.
        translator: Translator producing the error response.
    """

    def __init__(self, app: ASGIApp, translator: FaultTranslator) -> None:
        self.app = app
        self.translator = translator

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            request = Request(scope)
            if response_started:
                logger.error(
                    "Fault after response started on %s %s: %s",
                    request.method,
                    request_path(request),
                    type(exc).__name__,
                )
                raise
            response = self.translator.to_response(request, exc)
            await response(scope, receive, send)
