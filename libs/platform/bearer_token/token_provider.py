"""Standard bearer token provider: serialized and signed JSON Web Tokens."""

import json
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from jwt.utils import base64url_encode

from libs.platform.bearer_token.claims import (
    BearerTokenClaims,
    LoginAuthenticationToken,
    encode_issuer,
)
from libs.platform.bearer_token.exceptions import SigningError, TokenPreconditionError
from libs.platform.bearer_token.signer import JwsSignerProvider

logger = logging.getLogger(__name__)


def _encode_segment(value: dict[str, Any]) -> bytes:
    return base64url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


class StandardBearerTokenProvider:
    """Issues signed bearer tokens for authenticated identities.

    Every call produces a new token identifier; issuance is not idempotent.
    The signer is resolved per issuance from the signer provider using the
    token expiration and is not retained.

    Security:
    - NEVER logs tokens (logs jti and key identifier only)
    - Signing failures are never retried with another key
    """

    def __init__(
        self,
        signer_provider: JwsSignerProvider,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.signer_provider = signer_provider
        self._clock = clock or (lambda: datetime.now(UTC))

    def get_bearer_token(self, authentication: LoginAuthenticationToken | None) -> str:
        """Get a signed JSON Web Token for a login authentication token.

        Args:
            authentication: Authenticated identity (principal, username, issuer, expiration)

        Returns:
            Compact JWS serialization ``header.payload.signature``

        Raises:
            TokenPreconditionError: Identity missing or incomplete (no signer is selected)
            NoEligibleSignerError: No key valid through the expiration (propagated unchanged)
            SigningError: The selected signer failed
        """
        claims = self._build_claims(authentication)
        return self._get_signed_bearer_token(claims)

    def _build_claims(self, authentication: LoginAuthenticationToken | None) -> BearerTokenClaims:
        if authentication is None:
            raise TokenPreconditionError("LoginAuthenticationToken required")
        if authentication.principal is None:
            raise TokenPreconditionError("Principal required")
        if authentication.username is None:
            raise TokenPreconditionError("Username required")
        if authentication.issuer is None:
            raise TokenPreconditionError("Issuer required")

        expiration = authentication.expiration
        if expiration is None or expiration.tzinfo is None:
            raise TokenPreconditionError("Timezone-aware expiration required")

        now = self._clock()
        if expiration <= now:
            raise TokenPreconditionError(
                f"Expiration [{expiration.isoformat()}] must be after issue time [{now.isoformat()}]"
            )

        issuer = encode_issuer(authentication.issuer)
        return BearerTokenClaims(
            jwt_id=str(uuid.uuid4()),
            subject=str(authentication.principal),
            issuer=issuer,
            not_before=now,
            issued_at=now,
            expiration=expiration,
            preferred_username=authentication.username,
        )

    def _get_signed_bearer_token(self, claims: BearerTokenClaims) -> str:
        container = self.signer_provider.get_signer(claims.expiration)

        header = {"alg": container.algorithm, "kid": container.key_id, "typ": "JWT"}
        signing_input = _encode_segment(header) + b"." + _encode_segment(claims.to_payload())

        try:
            signature = container.signer.sign(signing_input)
        except Exception as e:
            # Signer capability boundary: every failure surfaces as SigningError
            logger.error(
                "bearer_token_signing_failed",
                extra={
                    "key_id": container.key_id,
                    "algorithm": container.algorithm,
                    "error_type": type(e).__name__,
                },
            )
            raise SigningError(container.algorithm, container.key_id) from e

        logger.debug(
            "bearer_token_signed",
            extra={
                "key_id": container.key_id,
                "subject": claims.subject,
                "jti": claims.jwt_id,  # Log token ID only, NEVER full token
            },
        )
        return (signing_input + b"." + base64url_encode(signature)).decode("ascii")
