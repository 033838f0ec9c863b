"""Bearer token issuance and verification exceptions."""

from datetime import datetime


class BearerTokenError(Exception):
    """Base exception for all bearer token errors."""


class BearerTokenConfigurationError(BearerTokenError):
    """Raised when signing key configuration is invalid."""


class TokenPreconditionError(BearerTokenError):
    """Raised when issuance is requested with a missing or incomplete identity.

    Raised before any signer is selected.
    """


class NoEligibleSignerError(BearerTokenError):
    """Raised when no signing key remains valid through the requested expiration."""

    def __init__(self, expiration: datetime, latest_key_expiration: datetime | None = None) -> None:
        if latest_key_expiration is None:
            message = f"No signing key available for expiration [{expiration.isoformat()}]"
        else:
            message = (
                f"No signing key valid through expiration [{expiration.isoformat()}]: "
                f"latest key expires [{latest_key_expiration.isoformat()}]"
            )
        super().__init__(message)
        self.expiration = expiration
        self.latest_key_expiration = latest_key_expiration


class SigningError(BearerTokenError):
    """Raised when the selected signer fails to produce a signature."""

    def __init__(self, algorithm: str, key_id: str) -> None:
        super().__init__(f"Signing Failed for Algorithm [{algorithm}] Key Identifier [{key_id}]")
        self.algorithm = algorithm
        self.key_id = key_id


class KeyProviderError(BearerTokenError):
    """Raised when a signing key provider cannot reach its key store."""


class TokenVerificationError(BearerTokenError):
    """Raised when a bearer token fails verification (key, algorithm, signature or claims)."""


__all__ = [
    "BearerTokenError",
    "BearerTokenConfigurationError",
    "TokenPreconditionError",
    "NoEligibleSignerError",
    "SigningError",
    "KeyProviderError",
    "TokenVerificationError",
]
