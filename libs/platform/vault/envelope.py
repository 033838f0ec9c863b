"""
Stored secret envelope and lookup results.

Key-value secrets are stored in Vault with the single-field shape
``{"value": <string-or-null>}``. The field name is a compatibility contract
with secrets already written by other services and must not change.

Reads distinguish three outcomes:
    - ``MissingSecret``: no secret exists at the key
    - ``FoundSecret(None)``: the secret exists and null was stored explicitly
    - ``FoundSecret("...")``: the secret exists with a value
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from libs.platform.vault.exceptions import SecretContractViolationError

VALUE_FIELD = "value"


@dataclass(frozen=True)
class SecretEnvelope:
    """Canonical wire shape of a stored key-value secret."""

    value: str | None

    def to_payload(self) -> dict[str, str | None]:
        """Return the exact mapping written to Vault."""
        return {VALUE_FIELD: self.value}

    @classmethod
    def from_payload(cls, data: Any, path: str) -> "SecretEnvelope":
        """
        Parse the ``data`` section of a key-value read response.

        Args:
            data: Value of ``response["data"]``
            path: Secret path used for error context

        Raises:
            SecretContractViolationError: data is not a mapping or lacks "value"
        """
        if not isinstance(data, Mapping):
            raise SecretContractViolationError(path=path, operation="read", missing_field="data")
        if VALUE_FIELD not in data:
            raise SecretContractViolationError(
                path=path, operation="read", missing_field=VALUE_FIELD
            )

        value = data[VALUE_FIELD]
        return cls(value=None if value is None else str(value))


@dataclass(frozen=True)
class FoundSecret:
    """A secret exists at the requested key; ``value`` may be explicit null."""

    value: str | None


@dataclass(frozen=True)
class MissingSecret:
    """No secret exists at the requested key."""


SecretLookup = FoundSecret | MissingSecret

MISSING = MissingSecret()
