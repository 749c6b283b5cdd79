"""Test helpers shared across test modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from youkhana.core.auth.jwt import SessionConfig

MASTER_EMAIL = "owner@youkhana.com"
ADMIN_EMAIL = "admin@youkhana.com"
MEMBER_EMAIL = "member@youkhana.com"

AUTH_BASE_URL = "http://localhost:3000/auth"
SESSION_CONFIG = SessionConfig(secret_key="test-secret")  # pragma: allowlist secret


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
