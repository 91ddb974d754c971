import logging

from fastapi import APIRouter, Depends

from donation_api.api.schemas import ClientLogEntry, LogSinkConfig
from donation_api.core import errors
from donation_api.core.config import Settings, get_settings

router = APIRouter()
client_logger = logging.getLogger("donation_api.client")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


@router.post("/logs")
async def client_log(entry: ClientLogEntry):
    """Browser-side log entries, re-emitted through the server loggers (and the sink)."""
    if not entry.level:
        raise errors.missing_required_field("level")
    if not entry.message:
        raise errors.missing_required_field("message")

    extra = {
        "client_context": entry.context,
        "source": entry.source,
        "client_service_name": entry.serviceName,
    }
    if entry.error:
        extra["client_error"] = entry.error

    client_logger.log(LEVELS.get(entry.level.lower(), logging.INFO), entry.message, extra=extra)
    return {"success": True}


@router.get("/config/grafana", response_model=LogSinkConfig)
async def log_sink_config(settings: Settings = Depends(get_settings)):
    return {"enabled": settings.log_sink_enabled}
