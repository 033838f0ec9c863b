"""
Root conftest for tests.

Provides shared fixtures for bearer token tests:
1. A controllable clock so issuance times are deterministic
2. Rotating signer providers with a generated signing key
"""

from datetime import UTC, datetime, timedelta

import pytest

from libs.platform.bearer_token.signer_provider import RotatingJwsSignerProvider


class FakeClock:
    """Callable clock that only moves when advanced."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    """Clock starting at the current whole second so issued tokens verify against real time."""
    return FakeClock(datetime.now(UTC).replace(microsecond=0))


@pytest.fixture()
def signer_provider(clock) -> RotatingJwsSignerProvider:
    """RS256 provider with one key valid for 12 hours."""
    provider = RotatingJwsSignerProvider(algorithm="RS256", clock=clock)
    provider.rotate()
    return provider
