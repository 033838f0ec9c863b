"""Vault connection configuration."""

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from libs.platform.vault.exceptions import VaultConfigurationError

_TRUTHY_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class VaultConfig:
    """Vault connection settings with secure defaults.

    All settings can be overridden via environment variables using from_env().
    """

    url: str
    token: str | None = None
    transit_mount_point: str = "transit"
    # True, False, or a path to a CA bundle
    verify: bool | str = True
    timeout_seconds: int = 30
    namespace: str | None = None  # Vault Enterprise namespace

    def validate(self) -> None:
        """Raise VaultConfigurationError if the settings cannot produce a working client."""
        parsed = urlparse(self.url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise VaultConfigurationError(
                f"Vault URL must be an http(s) URL with a host, got '{self.url}'"
            )
        if not self.token:
            raise VaultConfigurationError("Vault token is required (set VAULT_TOKEN)")
        if not self.transit_mount_point:
            raise VaultConfigurationError("Transit mount point must not be empty")
        if self.timeout_seconds <= 0:
            raise VaultConfigurationError(
                f"Timeout must be positive, got {self.timeout_seconds} seconds"
            )

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Load configuration from environment variables.

        Environment variable mapping:
        - VAULT_ADDR: Vault server URL (required)
        - VAULT_TOKEN: Vault token
        - VAULT_TRANSIT_MOUNT: Transit engine mount point (default: transit)
        - VAULT_CACERT: CA bundle used for TLS verification
        - VAULT_SKIP_VERIFY: Disable TLS verification (local development only)
        - VAULT_TIMEOUT: Request timeout in seconds (default: 30)
        - VAULT_NAMESPACE: Vault Enterprise namespace
        """
        verify: bool | str = True
        if os.getenv("VAULT_SKIP_VERIFY", "").strip().lower() in _TRUTHY_VALUES:
            verify = False
        elif ca_cert := os.getenv("VAULT_CACERT"):
            verify = ca_cert

        timeout_raw = os.getenv("VAULT_TIMEOUT", "30")
        try:
            timeout_seconds = int(timeout_raw)
        except ValueError as e:
            raise VaultConfigurationError(
                f"VAULT_TIMEOUT must be an integer, got '{timeout_raw}'"
            ) from e

        return cls(
            url=os.getenv("VAULT_ADDR", ""),
            token=os.getenv("VAULT_TOKEN"),
            transit_mount_point=os.getenv("VAULT_TRANSIT_MOUNT", "transit"),
            verify=verify,
            timeout_seconds=timeout_seconds,
            namespace=os.getenv("VAULT_NAMESPACE") or None,
        )
