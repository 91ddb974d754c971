import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from donation_api.admin.routes import admin_router
from donation_api.api import disbursement_router, donation_router, log_router, payment_router
from donation_api.core import errors
from donation_api.core.config import Settings, get_settings, validate_settings
from donation_api.core.logging_config import configure_logging
from donation_api.core.middleware import RequestContextMiddleware
from donation_api.db import session

logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: errors.ApiError):
    logger.warning(
        "Request rejected: %s",
        exc.code,
        extra={"path": request.url.path, "method": request.method, "status": exc.status_code},
    )
    return errors.error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = exc.errors()
    first = problems[0] if problems else {}
    field = str(first.get("loc", ["body"])[-1])
    if first.get("type") == "missing":
        api_error = errors.missing_required_field(field)
    else:
        api_error = errors.validation_error(
            first.get("msg", "Invalid request"),
            {"field": field, "errors": [{"loc": list(p.get("loc", [])), "msg": p.get("msg")} for p in problems]},
        )
    return await api_error_handler(request, api_error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return errors.error_response(errors.not_found("Endpoint"))
    if exc.status_code == 405:
        return JSONResponse(
            status_code=405,
            content=errors.error_body("METHOD_NOT_ALLOWED", "Method not allowed"),
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=errors.error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing, problems = validate_settings(settings)
        if missing or problems:
            # Keep serving: the public read endpoints work without these
            logger.error(
                "Environment validation failed",
                extra={"missing": missing, "errors": problems},
            )
        if settings.db_auto_create:
            await session.init_models()
        yield

    app = FastAPI(title="GDG Donation API", lifespan=lifespan)
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # Answers browser preflights; RequestContextMiddleware stamps the same headers on everything else
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(errors.ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(donation_router.router, prefix="/api")
    app.include_router(disbursement_router.router, prefix="/api")
    app.include_router(payment_router.router, prefix="/api")
    app.include_router(log_router.router, prefix="/api")
    app.include_router(admin_router)

    # Uploaded evidence served directly unless a CDN domain is configured
    if not settings.public_files_base_url:
        upload_dir = Path(settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    return app


app = create_app()
