"""
Bearer token library.

Issues signed JSON Web Tokens for authenticated identities, selecting the
signing key valid through each token's expiration so keys can rotate while
earlier tokens stay verifiable.

Quick Start:
    >>> from libs.platform.bearer_token import (
    ...     LoginAuthenticationToken,
    ...     RotatingJwsSignerProvider,
    ...     SigningKeyConfig,
    ...     StandardBearerTokenProvider,
    ... )
    >>> signer_provider = RotatingJwsSignerProvider.from_config(SigningKeyConfig.from_env())
    >>> token_provider = StandardBearerTokenProvider(signer_provider)
    >>> token = token_provider.get_bearer_token(login_authentication_token)
"""

from libs.platform.bearer_token.claims import (
    BearerTokenClaims,
    LoginAuthenticationToken,
    SupportedClaim,
    encode_issuer,
)
from libs.platform.bearer_token.config import SigningKeyConfig
from libs.platform.bearer_token.exceptions import (
    BearerTokenConfigurationError,
    BearerTokenError,
    KeyProviderError,
    NoEligibleSignerError,
    SigningError,
    TokenPreconditionError,
    TokenVerificationError,
)
from libs.platform.bearer_token.signer import (
    JwsSigner,
    JwsSignerContainer,
    JwsSignerProvider,
    PyJWTSigner,
)
from libs.platform.bearer_token.signer_provider import (
    RotatingJwsSignerProvider,
    SigningKey,
    generate_key_pair,
)
from libs.platform.bearer_token.token_provider import StandardBearerTokenProvider
from libs.platform.bearer_token.verifier import BearerTokenVerifier

__all__ = [
    # Issuance
    "StandardBearerTokenProvider",
    "LoginAuthenticationToken",
    "BearerTokenClaims",
    "SupportedClaim",
    "encode_issuer",
    # Signers and key rotation
    "JwsSigner",
    "PyJWTSigner",
    "JwsSignerContainer",
    "JwsSignerProvider",
    "RotatingJwsSignerProvider",
    "SigningKey",
    "SigningKeyConfig",
    "generate_key_pair",
    # Verification
    "BearerTokenVerifier",
    # Exceptions
    "BearerTokenError",
    "BearerTokenConfigurationError",
    "TokenPreconditionError",
    "NoEligibleSignerError",
    "SigningError",
    "KeyProviderError",
    "TokenVerificationError",
]
