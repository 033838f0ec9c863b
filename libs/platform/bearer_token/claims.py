"""Identity input and claims set for bearer token issuance."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import quote_plus


def encode_issuer(issuer: str) -> str:
    """URL-encode an issuer once for use as both the issuer and audience claims."""
    return quote_plus(issuer, safe="")


class SupportedClaim(StrEnum):
    """Claim names written into issued bearer tokens."""

    JWT_ID = "jti"
    SUBJECT = "sub"
    ISSUER = "iss"
    AUDIENCE = "aud"
    NOT_BEFORE = "nbf"
    ISSUED_AT = "iat"
    EXPIRATION = "exp"
    PREFERRED_USERNAME = "preferred_username"


@dataclass(frozen=True)
class LoginAuthenticationToken:
    """Authenticated identity produced by a login provider.

    Fields are optional at the type level so incomplete identities reach the
    token provider and are rejected there with TokenPreconditionError.
    """

    principal: Any
    username: str | None
    issuer: str | None
    expiration: datetime | None

    @classmethod
    def from_timestamp_millis(
        cls, principal: Any, username: str | None, issuer: str | None, expiration_millis: int
    ) -> "LoginAuthenticationToken":
        """Build a token whose expiration is given in epoch milliseconds."""
        return cls(
            principal=principal,
            username=username,
            issuer=issuer,
            expiration=datetime.fromtimestamp(expiration_millis / 1000, tz=UTC),
        )


@dataclass(frozen=True)
class BearerTokenClaims:
    """Claims set of an issued bearer token. Audience always equals issuer."""

    jwt_id: str
    subject: str
    issuer: str
    not_before: datetime
    issued_at: datetime
    expiration: datetime
    preferred_username: str

    @property
    def audience(self) -> str:
        return self.issuer

    def to_payload(self) -> dict[str, Any]:
        """Render the claims as a JWT payload with NumericDate (seconds) times."""
        return {
            SupportedClaim.JWT_ID.value: self.jwt_id,
            SupportedClaim.SUBJECT.value: self.subject,
            SupportedClaim.ISSUER.value: self.issuer,
            SupportedClaim.AUDIENCE.value: self.audience,
            SupportedClaim.NOT_BEFORE.value: int(self.not_before.timestamp()),
            SupportedClaim.ISSUED_AT.value: int(self.issued_at.timestamp()),
            SupportedClaim.EXPIRATION.value: int(self.expiration.timestamp()),
            SupportedClaim.PREFERRED_USERNAME.value: self.preferred_username,
        }
