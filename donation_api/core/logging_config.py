import asyncio
import json
import logging
import sys
import threading
from contextvars import ContextVar
from typing import Any, Dict, Optional

import httpx

from donation_api.core.config import Settings

# Set by the request middleware, read by every log record emitted while serving
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}

# Never forward the HTTP client's own records, or every send would log another send
_SILENT_LOGGERS = ("httpx", "httpcore")

_SEVERITY_NUMBERS = {
    logging.DEBUG: 5,
    logging.INFO: 9,
    logging.WARNING: 13,
    logging.ERROR: 17,
    logging.CRITICAL: 21,
}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the ``extra=`` fields attached to a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_record["request_id"] = request_id

        context = record_context(record)
        if context:
            log_record["context"] = context

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class OTLPLogHandler(logging.Handler):
    """Forward log records to an OTLP/HTTP logs endpoint (Grafana Cloud).

    Sending is fire-and-forget: inside an event loop the POST is scheduled
    as a task, otherwise it runs on a daemon thread. Failures are dropped;
    a broken telemetry backend must never fail a request.
    """

    def __init__(
        self,
        endpoint: str,
        auth: str,
        service_name: str,
        service_version: str,
        environment: str,
        level: int = logging.NOTSET,
    ):
        super().__init__(level)
        self.endpoint = endpoint
        self.auth = auth
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self._pending = set()
        self.addFilter(lambda record: not record.name.startswith(_SILENT_LOGGERS))

    def build_payload(self, record: logging.LogRecord) -> Dict[str, Any]:
        level = record.levelname.lower()
        attributes = [
            _attr("log.level", level),
            _attr("service.name", self.service_name),
            _attr("environment", self.environment),
            _attr("logger.name", record.name),
        ]

        request_id = getattr(record, "request_id", None)
        if request_id:
            attributes.append(_attr("request_id", request_id))

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            attributes.extend(
                [
                    _attr("error.type", type(exc).__name__),
                    _attr("error.message", str(exc)),
                    _attr("error.stack", logging.Formatter().formatException(record.exc_info)),
                ]
            )

        for key, value in record_context(record).items():
            attributes.append(_attr(f"context.{key}", value))

        log_record = {
            "timeUnixNano": str(int(record.created * 1_000_000_000)),
            "severityNumber": _SEVERITY_NUMBERS.get(record.levelno, 9),
            "severityText": record.levelname,
            "body": {"stringValue": record.getMessage()},
            "attributes": attributes,
        }

        return {
            "resourceLogs": [
                {
                    "resource": {
                        "attributes": [
                            _attr("service.name", self.service_name),
                            _attr("service.version", self.service_version),
                        ]
                    },
                    "scopeLogs": [{"logRecords": [log_record]}],
                }
            ]
        }

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Basic {self.auth}"}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = self.build_payload(record)
        except Exception:
            self.handleError(record)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._send(payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            threading.Thread(target=self._send_sync, args=(payload,), daemon=True).start()

    async def _send(self, payload: Dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient() as client:
                await client.post(self.endpoint, json=payload, headers=self.headers)
        except Exception as e:
            print(f"Failed to send log to OTLP sink: {e}", file=sys.stderr)

    def _send_sync(self, payload: Dict[str, Any]) -> None:
        try:
            httpx.post(self.endpoint, json=payload, headers=self.headers)
        except Exception as e:
            print(f"Failed to send log to OTLP sink: {e}", file=sys.stderr)


def _attr(key: str, value: Any) -> Dict[str, Any]:
    if not isinstance(value, str):
        value = json.dumps(value, default=str) if isinstance(value, (dict, list)) else str(value)
    return {"key": key, "value": {"stringValue": value}}


def configure_logging(settings: Settings) -> None:
    """
    Configures the root logger to output JSON to stdout and, when the
    Grafana OTLP credentials are present, to forward records there as well.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    # Clear any existing handlers
    if root_logger.handlers:
        root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    if settings.log_sink_enabled:
        sink = OTLPLogHandler(
            endpoint=settings.grafana_otlp_endpoint,
            auth=settings.grafana_otlp_auth,
            service_name=settings.service_name,
            service_version=settings.service_version,
            environment=settings.environment,
        )
        sink.addFilter(RequestIdFilter())
        root_logger.addHandler(sink)

    for name in _SILENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
