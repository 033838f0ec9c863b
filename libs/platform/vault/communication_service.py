"""
Vault Communication Service.

Public facade combining transit encryption and key-value secret storage on
top of a SecretBackendClient. It is a thin, fail-fast pass-through: no
retries, no backoff and no circuit breaking happen here. The only state it
owns is the per-namespace key-value handle cache.

Usage Example:
    >>> from libs.platform.vault.communication_service import VaultCommunicationService
    >>> service = VaultCommunicationService.from_env()
    >>> ciphertext = service.encrypt("nifi-sensitive-props", b"password")
    >>> service.decrypt("nifi-sensitive-props", ciphertext)
    b'password'
    >>> service.write_key_value_secret("kv/nifi", "db.password", "s3cret")
    >>> service.read_key_value_secret("kv/nifi", "db.password")
    FoundSecret(value='s3cret')
    >>> service.read_key_value_secret("kv/nifi", "missing")
    MissingSecret()
"""

import logging

from libs.platform.vault.backend import KeyValueOperations, SecretBackendClient
from libs.platform.vault.config import VaultConfig
from libs.platform.vault.envelope import (
    MISSING,
    FoundSecret,
    SecretEnvelope,
    SecretLookup,
)
from libs.platform.vault.handle_cache import KeyedHandleCache

logger = logging.getLogger(__name__)


class VaultCommunicationService:
    """
    Transit encryption and key-value secrets against Vault.

    Lifecycle:
        Key-value handles are created on first use of a namespace and kept
        until the service is discarded. The backend client is shared and is
        not mutated by the service.

    Thread Safety:
        All public methods are safe to call concurrently.
    """

    def __init__(self, backend: SecretBackendClient) -> None:
        self._backend = backend
        self._key_value_handles: KeyedHandleCache[KeyValueOperations] = KeyedHandleCache(
            backend.key_value_operations
        )

    @classmethod
    def from_config(cls, config: VaultConfig) -> "VaultCommunicationService":
        """
        Build a service backed by hvac.

        Raises:
            VaultConfigurationError: Invalid configuration
            SecretTransportError: Vault unreachable, sealed or token rejected
        """
        # Imported here so the facade works with other backends without hvac installed
        from libs.platform.vault.hvac_backend import HvacSecretBackendClient

        return cls(HvacSecretBackendClient(config))

    @classmethod
    def from_env(cls) -> "VaultCommunicationService":
        """Build a service from VAULT_* environment variables."""
        return cls.from_config(VaultConfig.from_env())

    def encrypt(self, transit_path: str, plaintext: bytes) -> str:
        """Encrypt ``plaintext`` with the transit key ``transit_path``; ciphertext is opaque."""
        return self._backend.encrypt_transit(transit_path, plaintext)

    def decrypt(self, transit_path: str, ciphertext: str) -> bytes:
        """Decrypt ``ciphertext`` with the transit key ``transit_path``."""
        return self._backend.decrypt_transit(transit_path, ciphertext)

    def write_key_value_secret(self, namespace: str, key: str, value: str | None) -> None:
        """
        Write ``{"value": value}`` to ``key`` in ``namespace``.

        Overwrites any existing value unconditionally (last write wins).
        """
        handle = self._key_value_handles.get_or_create(namespace)
        handle.put(key, SecretEnvelope(value=value))

    def read_key_value_secret(self, namespace: str, key: str) -> SecretLookup:
        """
        Read the "value" field of the secret at ``key`` in ``namespace``.

        Returns:
            MissingSecret when no secret exists at ``key``; FoundSecret otherwise
            (its value is None only when null was stored explicitly)

        Raises:
            SecretContractViolationError: Secret exists but lacks the "value" field
            SecretTransportError: Vault request failed
        """
        handle = self._key_value_handles.get_or_create(namespace)
        envelope = handle.get(key)
        if envelope is None:
            logger.debug("No secret found", extra={"namespace": namespace, "key": key})
            return MISSING
        return FoundSecret(value=envelope.value)

    @property
    def cached_namespaces(self) -> list[str]:
        """Namespaces with a constructed key-value handle."""
        return self._key_value_handles.namespaces()

    def close(self) -> None:
        """Release backend resources."""
        self._backend.close()

    def __enter__(self) -> "VaultCommunicationService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
