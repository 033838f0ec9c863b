"""
Abstract Secret Backend Client interface.

The communication facade depends only on these contracts so that the Vault
transport (hvac, TLS, retries) stays a replaceable collaborator.

Architecture:
    SecretBackendClient (ABC)
    ├── encrypt_transit / decrypt_transit - transit engine
    └── key_value_operations(namespace) -> KeyValueOperations (ABC)
                                           ├── put(key, envelope)
                                           └── get(key) -> envelope | None

Implementations:
    - HvacSecretBackendClient: HashiCorp Vault via hvac (hvac_backend.py)

Thread Safety:
    Implementations MUST be safe for concurrent use. The facade adds no
    locking around backend calls.

Failure semantics:
    - Transport, authentication and server failures raise SecretTransportError
    - A missing secret is ``None`` from ``KeyValueOperations.get``, never an error
    - A response lacking required fields raises SecretContractViolationError
"""

from abc import ABC, abstractmethod

from libs.platform.vault.envelope import SecretEnvelope


class KeyValueOperations(ABC):
    """Key-value operations scoped to a single namespace (mount path)."""

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Namespace this handle is bound to."""

    @abstractmethod
    def put(self, key: str, envelope: SecretEnvelope) -> None:
        """
        Store the envelope under ``key``, replacing any existing value.

        Raises:
            SecretTransportError: Write rejected or Vault unreachable
        """

    @abstractmethod
    def get(self, key: str) -> SecretEnvelope | None:
        """
        Fetch the envelope stored under ``key``.

        Returns:
            The envelope, or None when no secret exists at ``key``

        Raises:
            SecretTransportError: Read rejected or Vault unreachable
            SecretContractViolationError: Response missing the envelope fields
        """


class SecretBackendClient(ABC):
    """Client for the external secret service (transit + key-value engines)."""

    @abstractmethod
    def encrypt_transit(self, path: str, plaintext: bytes) -> str:
        """Encrypt ``plaintext`` with the transit key at ``path``; returns opaque ciphertext."""

    @abstractmethod
    def decrypt_transit(self, path: str, ciphertext: str) -> bytes:
        """Decrypt ciphertext produced by ``encrypt_transit`` with the same key."""

    @abstractmethod
    def key_value_operations(self, namespace: str) -> KeyValueOperations:
        """Create a key-value handle for ``namespace``. Called once per namespace by the facade."""

    def close(self) -> None:  # noqa: B027 - optional hook, default is a no-op
        """Release transport resources. Default implementation does nothing."""
