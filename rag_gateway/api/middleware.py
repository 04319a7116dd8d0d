"""Request-level middleware: bearer auth gate and error boundary."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from rag_gateway.api.responses import error_response
from rag_gateway.exceptions import AuthenticationError, GatewayError
from rag_gateway.logging_config import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "

# Reachable without a token even when tokens exist.
PUBLIC_PATHS = frozenset({"/", "/health"})


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Bearer-token gate.

    With no tokens registered every request passes. Once any token exists,
    all paths except the health check need `Authorization: Bearer <token>`
    matching one of the stored hashes, token management included.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        tokens = request.app.state.services.tokens
        header = request.headers.get("Authorization")

        # The token store reads the config file; an unreadable file denies everything.
        try:
            if await run_in_threadpool(tokens.exists):
                if not header or not header.startswith(BEARER_PREFIX):
                    return self._deny(request, "Authorization header with Bearer token required")

                if not await run_in_threadpool(tokens.validate, header[len(BEARER_PREFIX):]):
                    return self._deny(request, "Invalid bearer token")
        except GatewayError as e:
            logger.error(
                f"Auth check failed: {e.message}",
                extra={"error_code": e.code.value, "path": request.url.path},
            )
            return error_response(e.message, 500)

        return await call_next(request)

    def _deny(self, request: Request, message: str) -> Response:
        exc = AuthenticationError(message)
        logger.warning(
            f"Rejected request: {exc.message}",
            extra={"error_code": exc.code.value, "path": request.url.path},
        )
        return error_response(exc.message, 401, headers={"WWW-Authenticate": "Bearer"})


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Render anything no exception handler claimed as a 500 envelope.

    Sits inside the CORS middleware so these responses still carry CORS
    headers.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                f"Unhandled error: {e}",
                extra={"path": request.url.path, "method": request.method},
            )
            return error_response(str(e), 500)
