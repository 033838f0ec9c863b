"""Common utilities."""

from libs.common.log_redaction import (
    RedactingJSONFormatter,
    configure_logging,
    redact_string,
    redact_value,
)

__all__ = [
    "RedactingJSONFormatter",
    "configure_logging",
    "redact_string",
    "redact_value",
]
