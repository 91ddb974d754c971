"""Error envelope shared by every endpoint: ``{error, message, details?, request_id?}``."""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


class ApiError(Exception):
    """An error that maps one-to-one onto an HTTP error response."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


def error_body(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": code, "message": message}
    if details:
        body["details"] = details
    if request_id:
        body["request_id"] = request_id
    return body


def error_response(exc: ApiError, request_id: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.details, request_id),
    )


# ---------- 400 ----------
def validation_error(message: str, details: Optional[Dict[str, Any]] = None) -> ApiError:
    return ApiError(400, "VALIDATION_ERROR", message, details)


def missing_required_field(field: str) -> ApiError:
    return ApiError(400, "MISSING_REQUIRED_FIELD", f"Missing required field: {field}", {"field": field})


def field_error(code: str, message: str, field: str, **extra: Any) -> ApiError:
    return ApiError(400, code, message, {"field": field, **extra})


def donations_closed() -> ApiError:
    return ApiError(
        400,
        "DONATIONS_CLOSED",
        "Donasi saat ini ditutup. Terima kasih atas dukungan Anda.",
    )


# ---------- 401 ----------
def unauthorized(message: str = "Unauthorized access") -> ApiError:
    return ApiError(401, "UNAUTHORIZED", message)


def invalid_credentials() -> ApiError:
    return ApiError(401, "INVALID_CREDENTIALS", "Invalid credentials")


# ---------- 404 ----------
def not_found(resource: Optional[str] = None) -> ApiError:
    return ApiError(404, "NOT_FOUND", f"{resource or 'Resource'} not found", {"resource": resource})


# ---------- 5xx ----------
def external_service_error(service: str, message: str, **details: Any) -> ApiError:
    return ApiError(
        502,
        "EXTERNAL_SERVICE_ERROR",
        f"{service} error: {message}",
        {"service": service, **details},
    )


def internal_error(message: str = "Internal server error", details: Optional[Dict[str, Any]] = None) -> ApiError:
    return ApiError(500, "INTERNAL_ERROR", message, details)
