# app/main.py

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.api import admin, messages
from app.core.circuit_breaker import limiter, rate_limit_exceeded_handler
from app.core.config import Settings, load_settings
from app.core.errors import RelayError, StoreError
from app.core.guards import (
    BodySizeLimitMiddleware,
    PayloadTooLargeError,
    apply_cors_headers,
    apply_security_headers,
    payload_too_large_response,
)
from app.infra.postgres import create_store_engine, make_session_factory
from app.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_error_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        if isinstance(exc, StoreError):
            # Detail was logged where it happened; the client gets the safe text only
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
        return payload_too_large_response()

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside every other middleware
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = apply_security_headers(_error(500, "Server error"))
        return apply_cors_headers(request, response, settings.allowed_origins)

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the relay application.
    Settings are created once here (or passed in) and shared through app.state.
    """
    settings = settings or load_settings()
    setup_logger(settings.log_level)

    if not settings.admin_enabled:
        logger.warning("ADMIN_KEY is not set; admin routes will reject every request")

    app = FastAPI(
        title="QuickText Relay",
        version="1.0.0",
        description="Short-code ephemeral message relay",
    )

    engine = create_store_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.limiter = limiter

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        return apply_security_headers(await call_next(request))

    # Outermost, so oversized bodies are refused before anything parses them
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    _register_error_handlers(app, settings)

    # Register routers
    app.include_router(messages.router, tags=["Messages"])
    app.include_router(admin.router, tags=["Admin"])

    @app.get("/health")
    def health_check():
        return {"ok": True}

    return app


def run():
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
