"""JSON logging with request correlation and secret redaction.

Every record is rendered as one JSON object on stdout. Selected ``extra=``
attributes are promoted to top-level fields; anything that looks like a
credential is replaced before it reaches the formatter.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
# Per-request slot in the WSGI environ; ``g`` can span several requests
REQUEST_ID_ENVIRON_KEY = "authcore.request_id"

# ``extra=`` attributes copied into the JSON payload
PROMOTED_FIELDS = ("endpoint", "elapsed_ms", "account_id", "reason", "purged", "remote_addr")
# Attributes scrubbed on every record, whatever the logger
SECRET_FIELDS = frozenset({"password", "token", "access_token", "refresh_token", "authorization"})
REDACTED = "[redacted]"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            {key: getattr(record, key) for key in PROMOTED_FIELDS if hasattr(record, key)}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on each record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class RedactSecretsFilter(logging.Filter):
    """Overwrite credential-bearing ``extra=`` attributes with a placeholder."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in SECRET_FIELDS.intersection(vars(record)):
            setattr(record, key, REDACTED)
        return True


def ensure_request_id() -> str:
    """Return the request's correlation id, adopting a client header or minting one.

    Outside a request context a fresh UUID is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    environ = request.environ
    if REQUEST_ID_ENVIRON_KEY not in environ:
        incoming = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
            None,
        )
        environ[REQUEST_ID_ENVIRON_KEY] = incoming or str(uuid4())
    return environ[REQUEST_ID_ENVIRON_KEY]  # type: ignore[no-any-return]


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single JSON stdout handler on the root logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    handler.addFilter(RedactSecretsFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Seed the request id before each request and echo it on the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app"]
