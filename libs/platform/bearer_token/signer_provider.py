"""Rotating in-memory signing key provider.

Keys are generated with ``cryptography`` and held in memory only. Each key
carries a validity window; a token is signed with the newest key that stays
valid through the token's expiration, so verifiers can keep checking older
tokens with the previous key until those tokens expire.

Rotation is driven by the caller (e.g., a scheduler calling
``rotate_if_due()``); the provider starts no background work.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from libs.platform.bearer_token.config import EC_ALGORITHMS, RSA_ALGORITHMS, SigningKeyConfig
from libs.platform.bearer_token.exceptions import (
    BearerTokenConfigurationError,
    NoEligibleSignerError,
)
from libs.platform.bearer_token.signer import (
    JwsSignerContainer,
    JwsSignerProvider,
    PyJWTSigner,
)

logger = logging.getLogger(__name__)

_EC_CURVES: dict[str, Callable[[], ec.EllipticCurve]] = {
    "ES256": ec.SECP256R1,
    "ES384": ec.SECP384R1,
    "ES512": ec.SECP521R1,
}


@dataclass(frozen=True)
class SigningKey:
    """Generated key pair with its validity window."""

    key_id: str
    algorithm: str
    private_key: Any
    public_key: Any
    created_at: datetime
    expires_at: datetime

    def is_valid_through(self, instant: datetime) -> bool:
        return self.expires_at >= instant


def generate_key_pair(algorithm: str, key_size: int = 2048) -> tuple[Any, Any]:
    """Generate a (private_key, public_key) pair for a JWS algorithm."""
    if algorithm in RSA_ALGORITHMS:
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    elif algorithm in EC_ALGORITHMS:
        private_key = ec.generate_private_key(_EC_CURVES[algorithm]())
    else:
        raise BearerTokenConfigurationError(f"Unsupported signing algorithm [{algorithm}]")
    return private_key, private_key.public_key()


class RotatingJwsSignerProvider(JwsSignerProvider):
    """Signer provider holding a rotating set of in-memory signing keys.

    Thread Safety:
        Key list mutations and selection are guarded by a threading.Lock.
        Key generation happens outside the lock. rotate_if_due holds a
        separate rotation lock so concurrent schedulers rotate once per period.
    """

    def __init__(
        self,
        algorithm: str = "RS256",
        rotation_period: timedelta = timedelta(hours=1),
        key_lifetime: timedelta = timedelta(hours=12),
        key_size: int = 2048,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.algorithm = algorithm
        self.rotation_period = rotation_period
        self.key_lifetime = key_lifetime
        self.key_size = key_size
        self._clock = clock or (lambda: datetime.now(UTC))
        self._keys: list[SigningKey] = []
        self._lock = threading.Lock()
        # Serializes rotate_if_due so one rotation happens per period
        self._rotation_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: SigningKeyConfig) -> "RotatingJwsSignerProvider":
        """Build a provider from validated configuration and generate the first key."""
        config.validate()
        provider = cls(
            algorithm=config.algorithm,
            rotation_period=timedelta(seconds=config.rotation_period_seconds),
            key_lifetime=timedelta(seconds=config.key_lifetime_seconds),
            key_size=config.key_size,
        )
        provider.rotate()
        return provider

    def rotate(self, now: datetime | None = None) -> SigningKey:
        """Generate a new signing key valid from ``now`` for ``key_lifetime``."""
        now = now or self._clock()
        private_key, public_key = generate_key_pair(self.algorithm, self.key_size)
        key = SigningKey(
            key_id=str(uuid.uuid4()),
            algorithm=self.algorithm,
            private_key=private_key,
            public_key=public_key,
            created_at=now,
            expires_at=now + self.key_lifetime,
        )
        with self._lock:
            self._keys.append(key)

        logger.info(
            "signing_key_rotated",
            extra={
                "key_id": key.key_id,
                "algorithm": key.algorithm,
                "expires_at": key.expires_at.isoformat(),
            },
        )
        return key

    def rotate_if_due(self, now: datetime | None = None) -> SigningKey | None:
        """Rotate when there is no key or the newest key is older than the rotation period."""
        now = now or self._clock()
        with self._rotation_lock:
            with self._lock:
                newest = self._keys[-1] if self._keys else None
            if newest is not None and now - newest.created_at < self.rotation_period:
                return None
            return self.rotate(now)

    def remove_expired(self, now: datetime | None = None) -> list[str]:
        """Drop keys past their expiration; returns the removed key identifiers."""
        now = now or self._clock()
        with self._lock:
            expired = [key for key in self._keys if key.expires_at < now]
            self._keys = [key for key in self._keys if key.expires_at >= now]

        removed = [key.key_id for key in expired]
        if removed:
            logger.info("signing_keys_expired", extra={"key_ids": removed})
        return removed

    def get_signer(self, expiration: datetime) -> JwsSignerContainer:
        with self._lock:
            candidates = [
                (key.created_at, index, key)
                for index, key in enumerate(self._keys)
                if key.is_valid_through(expiration)
            ]
            latest = max((key.expires_at for key in self._keys), default=None)

        if not candidates:
            raise NoEligibleSignerError(expiration, latest)

        # Ties on created_at go to the most recently added key
        _created_at, _index, key = max(candidates, key=lambda candidate: candidate[:2])
        return JwsSignerContainer(
            key_id=key.key_id,
            algorithm=key.algorithm,
            signer=PyJWTSigner(key.algorithm, key.private_key),
        )

    def get_public_key(self, key_id: str) -> Any | None:
        """Return the public key for ``key_id``, or None when unknown or removed."""
        with self._lock:
            for key in self._keys:
                if key.key_id == key_id:
                    return key.public_key
        return None

    def public_keys(self) -> dict[str, Any]:
        """Return public keys by key identifier for all retained keys."""
        with self._lock:
            return {key.key_id: key.public_key for key in self._keys}
