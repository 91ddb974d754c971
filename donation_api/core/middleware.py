import json
import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from donation_api.core.errors import error_body
from donation_api.core.logging_config import request_id_var

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id + CORS on every response.

    JSON object bodies also get ``request_id`` injected; JSON arrays are
    passed through untouched so clients can keep treating them as arrays.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception(
                    "Unhandled API error",
                    extra={"path": request.url.path, "method": request.method},
                )
                response = unexpected_error_response(
                    exc, request_id, request.app.state.settings.is_production
                )
            else:
                response = await inject_request_id(response, request_id)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response


async def inject_request_id(response: Response, request_id: str) -> Response:
    content_type = response.headers.get("content-type", "")
    if "json" not in content_type:
        return response

    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode(response.charset)

    headers = {
        key: value
        for key, value in response.headers.items()
        if key.lower() != "content-length"
    }

    try:
        payload = json.loads(body)
    except ValueError:
        return Response(content=body, status_code=response.status_code, headers=headers)

    if isinstance(payload, dict):
        payload["request_id"] = request_id
        body = json.dumps(payload).encode("utf-8")

    return Response(
        content=body,
        status_code=response.status_code,
        headers=headers,
        media_type=content_type,
    )


def unexpected_error_response(exc: Exception, request_id: str, redact: bool) -> JSONResponse:
    if redact:
        message, details = "An unexpected error occurred", None
    else:
        message, details = str(exc) or type(exc).__name__, {"type": type(exc).__name__}
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_ERROR", message, details, request_id),
    )
