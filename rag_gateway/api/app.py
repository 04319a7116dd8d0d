"""FastAPI application entry point.

Configures the application with logging, auth, CORS, exception handling
and the route families.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rag_gateway import __version__
from rag_gateway.api import collections, llm, models, query, tokens
from rag_gateway.api.deps import Services
from rag_gateway.api.middleware import AuthGateMiddleware, ErrorBoundaryMiddleware
from rag_gateway.api.responses import error_response
from rag_gateway.config import Settings, get_settings
from rag_gateway.exceptions import ErrorCode, GatewayError
from rag_gateway.logging_config import get_logger, setup_logging
from rag_gateway.observability import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)

ENDPOINTS = {
    "apiTokens": "/api-tokens",
    "collections": "/collections",
    "models": "/models",
    "query": "/query",
    "embed": "/embed",
    "generate": "/generate",
    "chat": "/chat",
}

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MODEL_PULL_FAILED: 400,
    ErrorCode.EMBEDDING_PROBE_FAILED: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.TOKEN_NOT_FOUND: 404,
    ErrorCode.COLLECTION_NOT_FOUND: 404,
    ErrorCode.MODEL_NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.COLLECTION_EXISTS: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting RAG gateway",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
            "ollama_url": settings.ollama.url,
            "qdrant_url": settings.qdrant.url,
        },
    )

    yield

    logger.info("Shutting down RAG gateway")
    await app.state.services.close()


def create_app(
    settings: Settings | None = None,
    services: Services | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings override (default from environment).
        services: Pre-built backend clients and stores (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="RAG Gateway",
        description="Unified RAG API over Qdrant and Ollama",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services or Services.from_settings(settings)

    # Register exception handlers
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Middleware, innermost first
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(ErrorBoundaryMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Register routes
    app.add_api_route("/", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Health"])
    app.include_router(tokens.router)
    app.include_router(collections.router)
    app.include_router(models.router)
    app.include_router(query.router)
    app.include_router(llm.router)

    return app


async def gateway_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle GatewayError exceptions.

    Converts exceptions to the error envelope.
    """
    if not isinstance(exc, GatewayError):
        return error_response(str(exc), 500)

    status_code = _get_status_code(exc.code)
    log = logger.warning if status_code < 500 else logger.error
    log(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Render request validation failures as 400s."""
    if not isinstance(exc, RequestValidationError):
        return error_response(str(exc), 500)

    message = _format_validation_errors(exc)
    logger.warning(
        f"Invalid request: {message}",
        extra={"error_code": ErrorCode.VALIDATION_ERROR.value, "path": request.url.path},
    )
    return error_response(message, 400)


async def http_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Render routing errors (404, 405) in the envelope."""
    if not isinstance(exc, StarletteHTTPException):
        return error_response(str(exc), 500)

    return error_response(str(exc.detail), exc.status_code, headers=exc.headers)


def _get_status_code(code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    return STATUS_BY_CODE.get(code, 500)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts) or "Invalid request"


def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint, reachable without a token.

    Returns:
        Status, version, whether auth is on and the endpoint map.
    """
    services: Services = request.app.state.services
    return {
        "status": "ok",
        "version": __version__,
        "authEnabled": services.tokens.exists(),
        "endpoints": ENDPOINTS,
    }


async def metrics_endpoint() -> Response:
    """Prometheus metrics."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
