"""Structured JSON logging with secret redaction.

Log records are rendered as one JSON object per line. Fields passed through
``extra={...}`` are collected into a ``context`` dict. Bearer tokens, Vault
tokens, transit ciphertext and values under sensitive keys are masked before
output.

Example log output:
    {
        "timestamp": "2025-10-21T10:30:00.000Z",
        "level": "INFO",
        "service": "nifi-vault",
        "message": "Secret written to Vault",
        "context": {"namespace": "kv/nifi", "key": "db.password"}
    }

Usage:
    >>> from libs.common.log_redaction import configure_logging
    >>> configure_logging(service_name="nifi-vault", log_level="INFO")
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

REDACTED = "***"

JWT_PATTERN = re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
VAULT_TOKEN_PATTERN = re.compile(r"\b(?:hvs|hvb|hvr|s|b)\.[A-Za-z0-9_-]{20,}")
TRANSIT_CIPHERTEXT_PATTERN = re.compile(r"\bvault:v\d+:[A-Za-z0-9+/=]+")

SENSITIVE_KEY_FRAGMENTS = ("password", "secret", "token", "plaintext", "ciphertext")
SENSITIVE_KEYS = {"value", "private_key", "authorization"}

_RESERVED_LOGGING_FIELDS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "context", "taskName"}


def redact_string(text: str) -> str:
    """Mask bearer tokens, Vault tokens and transit ciphertext embedded in text."""
    redacted = JWT_PATTERN.sub("[jwt]" + REDACTED, text)
    redacted = VAULT_TOKEN_PATTERN.sub("[vault-token]" + REDACTED, redacted)
    return TRANSIT_CIPHERTEXT_PATTERN.sub("[ciphertext]" + REDACTED, redacted)


def _is_sensitive_key(key: str) -> bool:
    key = key.lower().replace("-", "_")
    return key in SENSITIVE_KEYS or any(fragment in key for fragment in SENSITIVE_KEY_FRAGMENTS)


def redact_value(value: Any) -> Any:
    """Recursively redact strings, dicts, lists and tuples."""
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_sensitive_key(str(key)) else redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(redact_value(item) for item in value)
    if isinstance(value, str):
        return redact_string(value)
    return value


class RedactingJSONFormatter(logging.Formatter):
    """Formatter that outputs redacted log records as JSON."""

    def __init__(self, service_name: str, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - matches logging API
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": redact_string(record.getMessage()),
        }

        context = self._extract_context(record)
        if context:
            log_entry["context"] = redact_value(context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": redact_string(str(record.exc_info[1])) if record.exc_info[1] else None,
                "traceback": redact_string(self.formatException(record.exc_info)),
            }

        return json.dumps(log_entry, default=str)

    @staticmethod
    def _format_timestamp(created: float) -> str:
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    @staticmethod
    def _extract_context(record: logging.LogRecord) -> dict[str, Any]:
        context: dict[str, Any] = {}
        explicit = getattr(record, "context", None)
        if isinstance(explicit, dict):
            context.update(explicit)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_LOGGING_FIELDS and not key.startswith("_"):
                context[key] = value
        return context


def configure_logging(service_name: str, log_level: str = "INFO") -> logging.Logger:
    """Configure redacted JSON logging on the root logger.

    Should be called once at service startup.

    Raises:
        ValueError: If log_level is invalid
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(RedactingJSONFormatter(service_name=service_name))
    root_logger.addHandler(handler)

    return root_logger
