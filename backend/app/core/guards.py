# app/core/guards.py

import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}

BODY_TOO_LARGE = "Request body too large"


def apply_security_headers(response):
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def apply_cors_headers(request, response, allowed_origins):
    """
    Used for 500 replies, which Starlette builds outside CORSMiddleware.
    Mirrors what CORSMiddleware sends for a simple credentialed request.
    """
    origin = request.headers.get("origin")
    if origin and origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
    return response


def payload_too_large_response() -> JSONResponse:
    return apply_security_headers(
        JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE})
    )


class PayloadTooLargeError(HTTPException):
    # An HTTPException so FastAPI's body parser re-raises it untouched
    def __init__(self):
        super().__init__(status_code=413, detail=BODY_TOO_LARGE)


class BodySizeLimitMiddleware:
    """
    Pure ASGI middleware bounding request bodies.

    A declared Content-Length above the limit is refused before the app runs.
    Otherwise received bytes are counted as the app reads them, so chunked
    uploads without Content-Length are cut off too.
    """

    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = dict(scope.get("headers") or []).get(b"content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body_bytes:
            logger.info("Refused %s bytes declared on %s", declared.decode(), scope.get("path"))
            await payload_too_large_response()(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.info("Body on %s exceeded %d bytes", scope.get("path"), self.max_body_bytes)
                    raise PayloadTooLargeError()
            return message

        async def tracking_send(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except PayloadTooLargeError:
            if response_started:
                raise
            await payload_too_large_response()(scope, receive, send)
