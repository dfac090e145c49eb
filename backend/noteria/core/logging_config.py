"""Structured logging configuration for Noteria.

JSON lines in production, plain text in development. The request context
middleware publishes the request id and the calling owner through context
variables; ``_ContextFilter`` stamps both onto every record emitted while
that request is handled, so service logs need not repeat them.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
owner_var: contextvars.ContextVar[str] = contextvars.ContextVar("owner", default="")


class _ContextFilter(logging.Filter):
    """Copy request id and owner onto the record unless ``extra`` already set them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        if not getattr(record, "owner", None):
            record.owner = owner_var.get() or "-"
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed through ``extra`` (``room_id``, ``rooms_deleted``...) become
    top-level keys; placeholder ``-`` context values are left out.
    """

    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys())

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in payload or value == "-":
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


_REDACTED = "***REDACTED***"

_SECRET_PATTERNS = [
    # Authorization headers
    re.compile(r'(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}'),
    # Bare JWTs: keep header and claims, drop the signature
    re.compile(r'\b(eyJ[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,}\.)[a-zA-Z0-9_\-]+'),
    # key=value pairs, e.g. from a settings dump or a DATABASE_URL query string
    re.compile(
        r'(?i)((?:secret|password|token|authorization|jwt_secret_key)[=:]\s*)[^\s,\'"]{8,}'
    ),
]


def redact(text: str) -> str:
    """Replace tokens and secrets in *text* with a placeholder."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + _REDACTED, text)
    return text


class _SecretFilter(logging.Filter):
    """Redact the formatted message and any cached traceback text."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True


_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s %(owner)s] %(message)s"


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure application-wide logging.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to INFO.
        log_format: ``"json"`` or ``"text"``. Defaults to ``"json"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_ContextFilter())
    handler.addFilter(_SecretFilter())
    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
