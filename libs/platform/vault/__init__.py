"""
Vault communication library.

Transit encryption and key-value secret storage against HashiCorp Vault.

Quick Start:
    >>> from libs.platform.vault import VaultCommunicationService
    >>> service = VaultCommunicationService.from_env()  # Reads VAULT_* env vars
    >>> service.write_key_value_secret("kv/nifi", "db.password", "s3cret")
    >>> service.read_key_value_secret("kv/nifi", "db.password")
    FoundSecret(value='s3cret')
"""

from typing import TYPE_CHECKING, Any

# hvac is only imported when the hvac backend is requested
if TYPE_CHECKING:
    from libs.platform.vault.hvac_backend import (
        HvacSecretBackendClient as HvacSecretBackendClient,
    )

from libs.platform.vault.backend import KeyValueOperations, SecretBackendClient
from libs.platform.vault.communication_service import VaultCommunicationService
from libs.platform.vault.config import VaultConfig
from libs.platform.vault.envelope import (
    MISSING,
    FoundSecret,
    MissingSecret,
    SecretEnvelope,
    SecretLookup,
)
from libs.platform.vault.exceptions import (
    SecretContractViolationError,
    SecretTransportError,
    VaultCommunicationError,
    VaultConfigurationError,
)
from libs.platform.vault.handle_cache import KeyedHandleCache


def __getattr__(name: str) -> Any:
    """Lazy load the hvac backend so hvac is only required when it is used."""
    if name == "HvacSecretBackendClient":
        from libs.platform.vault.hvac_backend import HvacSecretBackendClient

        return HvacSecretBackendClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Facade
    "VaultCommunicationService",
    "VaultConfig",
    # Backend contracts
    "SecretBackendClient",
    "KeyValueOperations",
    "HvacSecretBackendClient",
    "KeyedHandleCache",
    # Stored secret shape and read outcomes
    "SecretEnvelope",
    "SecretLookup",
    "FoundSecret",
    "MissingSecret",
    "MISSING",
    # Exceptions
    "VaultCommunicationError",
    "VaultConfigurationError",
    "SecretTransportError",
    "SecretContractViolationError",
]
