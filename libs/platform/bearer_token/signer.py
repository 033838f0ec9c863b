"""Signing capability and signer selection contracts.

A JwsSigner signs the JWS signing input (``base64url(header) + "." +
base64url(payload)``). A JwsSignerProvider resolves which signer, key
identifier and algorithm to use for a token expiring at a given instant.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from jwt.algorithms import get_default_algorithms


class JwsSigner(ABC):
    """Capability that produces a signature over a byte payload."""

    @abstractmethod
    def sign(self, signing_input: bytes) -> bytes:
        """Return the raw JWS signature for ``signing_input``."""


class PyJWTSigner(JwsSigner):
    """JwsSigner backed by PyJWT's algorithm implementations.

    Supports every algorithm PyJWT registers with ``cryptography`` installed
    (RS*, PS*, ES*, EdDSA, HS*).
    """

    def __init__(self, algorithm: str, private_key: Any) -> None:
        self.algorithm = algorithm
        self._private_key = private_key

    def sign(self, signing_input: bytes) -> bytes:
        algorithms = get_default_algorithms()
        if self.algorithm not in algorithms:
            raise NotImplementedError(f"Algorithm not supported: {self.algorithm}")
        algorithm = algorithms[self.algorithm]
        key = algorithm.prepare_key(self._private_key)
        return algorithm.sign(signing_input, key)  # type: ignore[no-any-return]


@dataclass(frozen=True)
class JwsSignerContainer:
    """Signer resolved for one issuance: key identifier, algorithm and capability."""

    key_id: str
    algorithm: str
    signer: JwsSigner


class JwsSignerProvider(ABC):
    """Resolves the signer valid through a token's expiration (key rotation policy)."""

    @abstractmethod
    def get_signer(self, expiration: datetime) -> JwsSignerContainer:
        """
        Return a signer whose key stays valid through ``expiration``.

        Raises:
            NoEligibleSignerError: No key is valid through ``expiration``
            KeyProviderError: Key store unreachable
        """
