"""Request logging and log formatting.

One log record per request: method, matched route, status, duration and the
caller's user id from the identity header (``None`` for anonymous visitors).
Every response carries the request id in ``X-Request-ID``.
"""
import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from toolhub.settings import Settings, settings as default_settings

REQUEST_ID_HEADER = "X-Request-ID"

# Record attributes copied into JSON output when set via ``extra=``
_PASSTHROUGH_FIELDS = ("request_id", "user_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _PASSTHROUGH_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _route_template(request: Request) -> str:
    """Route path pattern (``/api/tools/{tool_id}``) or the raw path when unmatched."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once it finishes, tagged with the caller's user id."""

    def __init__(self, app: ASGIApp, user_id_header: Optional[str] = None):
        super().__init__(app)
        self.user_id_header = user_id_header or default_settings.USER_ID_HEADER
        self.logger = logging.getLogger("toolhub.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        user_id = (request.headers.get(self.user_id_header) or "").strip() or None

        start = time.perf_counter()
        fields = {"method": request.method, "path": request.url.path}
        extra = {"request_id": request_id, "user_id": user_id, "extra_fields": fields}

        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
            self.logger.exception(
                f"{request.method} {request.url.path} failed", extra=extra
            )
            raise

        fields["route"] = _route_template(request)
        fields["status_code"] = response.status_code
        fields["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra=extra,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_logging(config: Optional[Settings] = None):
    """Configure the root logger from LOG_LEVEL, LOG_FORMAT and LOG_FILE."""
    config = config or default_settings

    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    if config.LOG_FORMAT == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
    root_logger.addHandler(console_handler)

    if config.LOG_FILE:
        file_handler = logging.FileHandler(config.LOG_FILE)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # The request middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={config.LOG_LEVEL}, format={config.LOG_FORMAT}")
