"""Signing key configuration for bearer token issuance."""

import os
from dataclasses import dataclass

from libs.platform.bearer_token.exceptions import BearerTokenConfigurationError

RSA_ALGORITHMS = frozenset({"RS256", "RS384", "RS512", "PS256", "PS384", "PS512"})
EC_ALGORITHMS = frozenset({"ES256", "ES384", "ES512"})
SUPPORTED_ALGORITHMS = RSA_ALGORITHMS | EC_ALGORITHMS


@dataclass(frozen=True)
class SigningKeyConfig:
    """Signing key generation and rotation settings.

    A key is used for new tokens for ``rotation_period_seconds`` and stays
    available for ``key_lifetime_seconds``, which bounds the longest token
    expiration it can sign.
    """

    algorithm: str = "RS256"
    key_size: int = 2048  # RSA only
    rotation_period_seconds: int = 3600  # 1 hour
    key_lifetime_seconds: int = 43200  # 12 hours

    def validate(self) -> None:
        """Raise BearerTokenConfigurationError for unusable settings."""
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise BearerTokenConfigurationError(
                f"Unsupported signing algorithm [{self.algorithm}], "
                f"expected one of {sorted(SUPPORTED_ALGORITHMS)}"
            )
        if self.algorithm in RSA_ALGORITHMS and self.key_size < 2048:
            raise BearerTokenConfigurationError(
                f"RSA key size must be at least 2048 bits, got {self.key_size}"
            )
        if self.rotation_period_seconds <= 0:
            raise BearerTokenConfigurationError("Key rotation period must be positive")
        if self.key_lifetime_seconds <= self.rotation_period_seconds:
            raise BearerTokenConfigurationError(
                "Key lifetime must be longer than the rotation period"
            )

    @classmethod
    def from_env(cls) -> "SigningKeyConfig":
        """Load configuration from environment variables.

        Environment variable mapping:
        - JWT_SIGNING_ALGORITHM: JWS algorithm (default: RS256)
        - JWT_RSA_KEY_SIZE: RSA key size in bits (default: 2048)
        - JWT_KEY_ROTATION_SECONDS: Rotation period in seconds (default: 3600)
        - JWT_KEY_LIFETIME_SECONDS: Key lifetime in seconds (default: 43200)
        """
        try:
            return cls(
                algorithm=os.getenv("JWT_SIGNING_ALGORITHM", "RS256"),
                key_size=int(os.getenv("JWT_RSA_KEY_SIZE", "2048")),
                rotation_period_seconds=int(os.getenv("JWT_KEY_ROTATION_SECONDS", "3600")),
                key_lifetime_seconds=int(os.getenv("JWT_KEY_LIFETIME_SECONDS", "43200")),
            )
        except ValueError as e:
            raise BearerTokenConfigurationError(f"Invalid signing key setting: {e}") from e
