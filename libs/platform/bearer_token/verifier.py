"""Bearer token verification with key selection by key identifier.

Verifiers select the public key named in the token's ``kid`` header, so
tokens signed before a key rotation remain verifiable until the old key is
removed.

Security:
- Algorithm pinning: only configured algorithms are accepted (never "none")
- Claim validation: iss, aud, exp, nbf, iat, jti, sub
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

import jwt

from libs.platform.bearer_token.claims import SupportedClaim, encode_issuer
from libs.platform.bearer_token.config import SUPPORTED_ALGORITHMS
from libs.platform.bearer_token.exceptions import TokenVerificationError

logger = logging.getLogger(__name__)


class BearerTokenVerifier:
    """Validates bearer tokens issued by StandardBearerTokenProvider."""

    def __init__(
        self,
        key_source: Callable[[str], Any | None],
        issuer: str,
        allowed_algorithms: Iterable[str] | None = None,
        clock_skew_seconds: int = 30,
    ) -> None:
        """Initialize verifier.

        Args:
            key_source: Returns the public key for a key identifier, or None if unknown
                (e.g., RotatingJwsSignerProvider.get_public_key)
            issuer: Issuer as given to the token provider (URL-encoded here the same way)
            allowed_algorithms: Accepted algorithms (default: all supported asymmetric algorithms)
            clock_skew_seconds: Leeway applied to time-based claims
        """
        self._key_source = key_source
        self.issuer = encode_issuer(issuer)
        self.allowed_algorithms = sorted(allowed_algorithms or SUPPORTED_ALGORITHMS)
        self.clock_skew_seconds = clock_skew_seconds

    def verify(self, token: str) -> dict[str, Any]:
        """Verify signature and claims; returns the decoded claims.

        Raises:
            TokenVerificationError: Malformed token, unknown kid, disallowed algorithm,
                invalid signature, expired or not-yet-valid token, wrong issuer/audience
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(f"Malformed token: {e}") from e

        key_id = header.get("kid")
        algorithm = header.get("alg")

        if algorithm not in self.allowed_algorithms:
            raise TokenVerificationError(
                f"Algorithm [{algorithm}] not allowed. Only {self.allowed_algorithms} permitted."
            )
        if not key_id:
            raise TokenVerificationError("Token header missing kid")

        public_key = self._key_source(key_id)
        if public_key is None:
            logger.warning("verification_key_not_found", extra={"kid": key_id, "alg": algorithm})
            raise TokenVerificationError(f"Verification key with kid={key_id} not found")

        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                public_key,
                algorithms=[algorithm],
                issuer=self.issuer,
                audience=self.issuer,
                leeway=self.clock_skew_seconds,
                options={
                    "require": [
                        SupportedClaim.EXPIRATION.value,
                        SupportedClaim.ISSUED_AT.value,
                        SupportedClaim.NOT_BEFORE.value,
                        SupportedClaim.JWT_ID.value,
                        SupportedClaim.SUBJECT.value,
                    ],
                },
            )
        except jwt.InvalidTokenError as e:
            logger.warning(
                "token_verification_failed",
                extra={"kid": key_id, "alg": algorithm, "error_type": type(e).__name__},
            )
            raise TokenVerificationError(f"Invalid token: {e}") from e

        return claims
