"""
Not-found handler for unmatched routes.

Installed as the router's default application, so it only runs when no
route matched the request path. A path that matches with the wrong
method is not "unmatched"; the router raises a 405 for it instead.
"""

import logging

from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocketClose

from faultline.shared.errors.codes import ErrorCode
from faultline.shared.errors.formatter import CanonicalErrorResponse
from faultline.shared.errors.handlers import request_path

logger = logging.getLogger(__name__)


def not_found_body(method: str, path: str) -> CanonicalErrorResponse:
    """Build the 404 body for ``method`` and ``path``."""
    return CanonicalErrorResponse(
        error_name="NotFoundError",
        error_code=ErrorCode.NOT_FOUND,
        http_status=404,
        message=f"The requested endpoint {method} {path} was not found",
        path=path,
    )


async def not_found_app(scope: Scope, receive: Receive, send: Send) -> None:
    """ASGI app answering every request that matched no route."""
    if scope["type"] == "websocket":
        await WebSocketClose()(scope, receive, send)
        return

    request = Request(scope)
    path = request_path(request)
    logger.info("No route for %s %s", request.method, path)
    response = not_found_body(request.method, path).to_response()
    await response(scope, receive, send)


def install_not_found_handler(app: FastAPI) -> None:
    """Make ``not_found_app`` the router's fallback for unmatched paths."""
    app.router.default = not_found_app
