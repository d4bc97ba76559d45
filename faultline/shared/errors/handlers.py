"""
Centralized fault translation for FastAPI.

The FaultTranslator is the only place that turns an exception into an
HTTP response. Route handlers, storage, token, upload and network
layers never build error responses themselves.

No internal details are exposed to clients outside debug mode.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from faultline.shared.errors.cascade import classify
from faultline.shared.errors.formatter import CanonicalErrorResponse, format_error

logger = logging.getLogger(__name__)

HTTP_500 = 500


def request_path(request: Request) -> str:
    """Return the path and query string the client asked for."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class FaultTranslator:
    """Converts any exception into the canonical error response.

    Args:
        debug: Expose stack traces and raw messages of unclassified faults.
    """

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def translate(
        self, exc: BaseException, method: str, path: str
    ) -> CanonicalErrorResponse:
        """Classify ``exc`` and build the response body.

        Args:
            exc: The exception raised while serving the request.
            method: HTTP method of the request.
            path: Request path with query string.

        Returns:
            The canonical error response model.
        """
        classification = classify(exc, debug=self.debug)
        body = format_error(classification, exc, path, debug=self.debug)

        if classification.http_status >= HTTP_500:
            logger.error(
                "%s %s failed [%s] %s: %s",
                method,
                path,
                classification.rule,
                body.error_code.value,
                type(exc).__name__,
                exc_info=exc,
            )
        else:
            logger.warning(
                "%s %s rejected [%s] %s",
                method,
                path,
                classification.rule,
                body.error_code.value,
            )
        return body

    def to_response(self, request: Request, exc: BaseException) -> JSONResponse:
        """Translate ``exc`` raised while serving ``request`` into a response."""
        body = self.translate(exc, request.method, request_path(request))
        headers = getattr(exc, "headers", None)
        return body.to_response(headers=headers if isinstance(headers, dict) else None)

    async def handle(self, request: Request, exc: Exception) -> JSONResponse:
        """Exception-handler entry point for FastAPI."""
        return self.to_response(request, exc)


def get_translator(app: FastAPI) -> Optional[FaultTranslator]:
    """Return the translator registered on ``app``, if any."""
    return getattr(app.state, "fault_translator", None)


def register_error_handlers(app: FastAPI, debug: bool = False) -> FaultTranslator:
    """Register the fault translator on the FastAPI application.

    Framework exceptions that Starlette's ExceptionMiddleware would
    otherwise answer with its own body are routed here. Everything else
    reaches the translator through AsyncBoundaryMiddleware.

    Args:
        app: The FastAPI application instance.
        debug: Debug mode flag passed to the translator.

    Returns:
        The registered translator.
    """
    translator = FaultTranslator(debug=debug)
    app.state.fault_translator = translator

    app.add_exception_handler(StarletteHTTPException, translator.handle)
    app.add_exception_handler(RequestValidationError, translator.handle)
    return translator
