"""
Vault Communication Exception Hierarchy.

This module defines the exceptions raised by the Vault communication layer,
separating configuration problems, transport/authentication failures and
backend responses that break the stored-secret contract.

Exception hierarchy:
    VaultCommunicationError (base)
    ├── VaultConfigurationError - Invalid backend configuration at construction
    ├── SecretTransportError - Network/auth/server failure talking to Vault
    └── SecretContractViolationError - Response missing a required field

A secret that does not exist is NOT an error: reads return
``MissingSecret`` (see envelope.py).

All exceptions carry structured context (path, operation) and never include
secret values, plaintext or ciphertext.
"""


class VaultCommunicationError(Exception):
    """
    Base exception for all Vault communication errors.

    Attributes:
        path: Namespace, transit key or secret path involved (e.g., "kv/app/db")
        operation: Operation being performed ("encrypt", "read", "write", ...)
        message: Human-readable error message (MUST NOT include secret values)

    Example:
        >>> try:
        ...     service.decrypt("nifi-key", ciphertext)
        ... except VaultCommunicationError as e:
        ...     logger.error("Vault failure", extra={"path": e.path, "operation": e.operation})
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.operation = operation
        self.message = message

    def __str__(self) -> str:
        """
        Format error message with context (path + operation).

        Example:
            >>> str(VaultCommunicationError("Timeout", "kv/app", "read"))
            'Timeout (path: kv/app, operation: read)'
        """
        context_parts = []
        if self.path:
            context_parts.append(f"path: {self.path}")
        if self.operation:
            context_parts.append(f"operation: {self.operation}")

        if context_parts:
            context = ", ".join(context_parts)
            return f"{self.message} ({context})"
        return self.message


class VaultConfigurationError(VaultCommunicationError):
    """
    Raised when the Vault backend configuration is invalid.

    Raised at construction time only (missing URL, unsupported scheme,
    missing token, non-positive timeout). No client is constructed when
    this is raised.
    """

    def __init__(self, reason: str) -> None:
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")
        super().__init__(message=f"Invalid Vault configuration: {reason}", operation="configure")


class SecretTransportError(VaultCommunicationError):
    """
    Raised when talking to Vault fails (network, authentication, server error).

    This exception is raised when:
    - Vault is unreachable after transport retries
    - Token is invalid, expired or lacks the required policy
    - Vault is sealed
    - Vault rejects the request (e.g., malformed ciphertext, unknown transit key)

    It is never retried by the communication facade. The original hvac
    exception is chained as ``__cause__``.
    """

    def __init__(self, path: str, operation: str, reason: str) -> None:
        if not isinstance(path, str) or not path:
            raise TypeError("path must be a non-empty string")
        if not isinstance(operation, str) or not operation:
            raise TypeError("operation must be a non-empty string")
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        super().__init__(
            message=f"Vault request failed: {reason}",
            path=path,
            operation=operation,
        )
        self.reason = reason


class SecretContractViolationError(VaultCommunicationError):
    """
    Raised when Vault returns a response that breaks the expected shape.

    Stored secrets are expected as ``{"value": <string-or-null>}``. A
    response that exists but has no ``data`` section, or whose data lacks the
    ``value`` field, signals misconfiguration (wrong engine version, secret
    written by another tool) and must not be reported as an absent secret.
    """

    def __init__(self, path: str, operation: str, missing_field: str) -> None:
        super().__init__(
            message=f"Vault response missing required field '{missing_field}'",
            path=path,
            operation=operation,
        )
        self.missing_field = missing_field
