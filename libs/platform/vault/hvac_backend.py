"""
HashiCorp Vault Secret Backend Client.

This module implements HvacSecretBackendClient, the SecretBackendClient used in
deployed environments. It talks to Vault through the hvac library.

Architecture:
    - Transit engine for encrypt/decrypt (key material never leaves Vault)
    - Key/Value version 1 engine for stored secrets, one mount per namespace
    - Token-based authentication
    - Automatic retries (3 attempts, exponential backoff) for transient
      transport failures only (VaultDown, connection errors, timeouts)
    - Everything else fails fast and is surfaced as SecretTransportError

Security Considerations:
    - Secret values, plaintext and ciphertext are NEVER logged (only paths)
    - Token stored in memory only (never persisted to disk)
    - TLS verification enabled by default
    - Sealed vault detection and error reporting

Usage Example:
    >>> from libs.platform.vault.config import VaultConfig
    >>> from libs.platform.vault.hvac_backend import HvacSecretBackendClient
    >>> backend = HvacSecretBackendClient(
    ...     VaultConfig(url="https://vault.company.com:8200", token="hvs.abc123")
    ... )
    >>> ciphertext = backend.encrypt_transit("nifi-sensitive-props", b"secret")
"""

import base64
import binascii
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import hvac
import requests
from hvac.exceptions import (
    Forbidden,
    InvalidPath,
    InvalidRequest,
    Unauthorized,
    VaultDown,
    VaultError,
)
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from libs.platform.vault.backend import KeyValueOperations, SecretBackendClient
from libs.platform.vault.config import VaultConfig
from libs.platform.vault.envelope import SecretEnvelope
from libs.platform.vault.exceptions import (
    SecretContractViolationError,
    SecretTransportError,
    VaultCommunicationError,
    VaultConfigurationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_ERRORS = (VaultDown, requests.exceptions.ConnectionError, requests.exceptions.Timeout)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)
def _with_retry(request: Callable[[], T]) -> T:
    return request()


def _call_vault(operation: str, path: str, request: Callable[[], T]) -> T:
    """Run a Vault request, translating hvac/transport failures to SecretTransportError."""
    try:
        return _with_retry(request)
    except VaultCommunicationError:
        # Raised intentionally inside the request (contract violations)
        raise
    except _TRANSIENT_ERRORS as e:
        logger.error(
            "Vault unreachable after retries",
            extra={"path": path, "operation": operation, "error_type": type(e).__name__},
        )
        raise SecretTransportError(
            path=path,
            operation=operation,
            reason=f"Vault server unreachable: {e}",
        ) from e
    except (Unauthorized, Forbidden) as e:
        raise SecretTransportError(
            path=path,
            operation=operation,
            reason=f"Permission denied for {operation} on '{path}'. Verify token policy: {e}",
        ) from e
    except InvalidRequest as e:
        raise SecretTransportError(
            path=path,
            operation=operation,
            reason=f"Vault rejected {operation} request for '{path}': {e}",
        ) from e
    except VaultError as e:
        logger.error(
            "Vault request failed - server error",
            extra={
                "path": path,
                "operation": operation,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise SecretTransportError(
            path=path,
            operation=operation,
            reason=f"Vault error during {operation} on '{path}': {e}",
        ) from e


def _require_data(response: Any, path: str, operation: str) -> dict[str, Any]:
    """Return ``response["data"]`` or raise SecretContractViolationError."""
    data = response.get("data") if isinstance(response, dict) else None
    if not isinstance(data, dict):
        raise SecretContractViolationError(path=path, operation=operation, missing_field="data")
    return data


class HvacKeyValueOperations(KeyValueOperations):
    """
    Key/Value version 1 operations bound to one mount path.

    Secrets are stored at ``{namespace}/{key}`` with the payload
    ``{"value": <string-or-null>}``.
    """

    def __init__(self, client: hvac.Client, namespace: str) -> None:
        self._client = client
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def _secret_path(self, key: str) -> str:
        return f"{self._namespace}/{key}"

    def put(self, key: str, envelope: SecretEnvelope) -> None:
        secret_path = self._secret_path(key)
        _call_vault(
            "write",
            secret_path,
            lambda: self._client.secrets.kv.v1.create_or_update_secret(
                path=key,
                secret=envelope.to_payload(),
                mount_point=self._namespace,
            ),
        )
        logger.info(
            "Secret written to Vault",
            extra={"namespace": self._namespace, "key": key},
        )

    def get(self, key: str) -> SecretEnvelope | None:
        secret_path = self._secret_path(key)

        def read() -> SecretEnvelope | None:
            try:
                response = self._client.secrets.kv.v1.read_secret(
                    path=key,
                    mount_point=self._namespace,
                )
            except InvalidPath:
                return None
            if response is None:
                return None
            return SecretEnvelope.from_payload(
                _require_data(response, secret_path, "read"), secret_path
            )

        envelope = _call_vault("read", secret_path, read)
        logger.debug(
            "Secret read from Vault",
            extra={"namespace": self._namespace, "key": key, "found": envelope is not None},
        )
        return envelope


class HvacSecretBackendClient(SecretBackendClient):
    """
    HashiCorp Vault backend built on hvac.

    Thread Safety:
        hvac.Client is shared by all handles and is not mutated after
        construction; requests are issued through its pooled HTTP adapter.

    Example:
        >>> with HvacSecretBackendClient(VaultConfig.from_env()) as backend:
        ...     handle = backend.key_value_operations("kv/nifi")
        ...     handle.get("sensitive.props.key")
    """

    def __init__(self, config: VaultConfig) -> None:
        """
        Connect to Vault and verify the token.

        Raises:
            VaultConfigurationError: Invalid URL, missing token or bad client options
            SecretTransportError: Authentication failure, sealed or unreachable Vault
        """
        config.validate()
        self._config = config
        self._vault_url = config.url
        self._transit_mount_point = config.transit_mount_point

        try:
            self._client = hvac.Client(
                url=config.url,
                token=config.token,
                verify=config.verify,
                timeout=config.timeout_seconds,
                namespace=config.namespace,
            )

            # is_authenticated() needs the 'lookup-self' capability; tokens
            # without it are accepted and validated on first use.
            try:
                if not self._client.is_authenticated():
                    raise SecretTransportError(
                        path="auth/token/lookup-self",
                        operation="authenticate",
                        reason=(
                            f"Vault authentication failed for {config.url}. "
                            f"Verify token is valid and not expired."
                        ),
                    )
            except Forbidden:
                logger.info(
                    "Vault token lacks 'lookup-self' capability, deferring validation",
                    extra={"vault_url": config.url},
                )

            try:
                if self._client.sys.is_sealed():
                    raise SecretTransportError(
                        path="sys/seal-status",
                        operation="connect",
                        reason=(
                            f"Vault is sealed at {config.url}. "
                            f"Unseal Vault before accessing secrets."
                        ),
                    )
            except Forbidden:
                logger.info(
                    "Vault token lacks 'sys/seal-status' capability, skipping seal check",
                    extra={"vault_url": config.url},
                )

            logger.info(
                "Connected to Vault successfully",
                extra={
                    "vault_url": config.url,
                    "transit_mount_point": config.transit_mount_point,
                },
            )

        except VaultCommunicationError:
            raise
        except (Unauthorized, Forbidden) as e:
            raise SecretTransportError(
                path="auth/token/lookup-self",
                operation="authenticate",
                reason=f"Vault authentication failed: {e}",
            ) from e
        except _TRANSIENT_ERRORS as e:
            raise SecretTransportError(
                path="sys/health",
                operation="connect",
                reason=f"Vault server unreachable at {config.url}: {e}",
            ) from e
        except VaultError as e:
            logger.error(
                "Vault initialization failed - server error",
                extra={"vault_url": config.url, "error_type": type(e).__name__},
                exc_info=True,
            )
            raise SecretTransportError(
                path="sys/health",
                operation="connect",
                reason=f"Vault initialization failed: {e}",
            ) from e
        except (ValueError, TypeError) as e:
            raise VaultConfigurationError(f"Invalid Vault client options: {e}") from e

    def encrypt_transit(self, path: str, plaintext: bytes) -> str:
        encoded = base64.b64encode(plaintext).decode("ascii")
        response = _call_vault(
            "encrypt",
            path,
            lambda: self._client.secrets.transit.encrypt_data(
                name=path,
                plaintext=encoded,
                mount_point=self._transit_mount_point,
            ),
        )
        data = _require_data(response, path, "encrypt")
        if "ciphertext" not in data:
            raise SecretContractViolationError(
                path=path, operation="encrypt", missing_field="ciphertext"
            )
        return str(data["ciphertext"])

    def decrypt_transit(self, path: str, ciphertext: str) -> bytes:
        response = _call_vault(
            "decrypt",
            path,
            lambda: self._client.secrets.transit.decrypt_data(
                name=path,
                ciphertext=ciphertext,
                mount_point=self._transit_mount_point,
            ),
        )
        data = _require_data(response, path, "decrypt")
        if "plaintext" not in data:
            raise SecretContractViolationError(
                path=path, operation="decrypt", missing_field="plaintext"
            )
        try:
            return base64.b64decode(data["plaintext"] or "", validate=True)
        except (binascii.Error, TypeError) as e:
            raise SecretContractViolationError(
                path=path, operation="decrypt", missing_field="plaintext"
            ) from e

    def key_value_operations(self, namespace: str) -> KeyValueOperations:
        logger.debug("Creating key-value handle", extra={"namespace": namespace})
        return HvacKeyValueOperations(self._client, namespace)

    def close(self) -> None:
        """Close the hvac client's HTTP adapter (connection pool)."""
        adapter = getattr(self._client, "adapter", None)
        if adapter and hasattr(adapter, "close"):
            adapter.close()
        logger.info("Vault backend closed", extra={"vault_url": self._vault_url})

    def __enter__(self) -> "HvacSecretBackendClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
