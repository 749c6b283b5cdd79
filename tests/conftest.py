"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import fakeredis
import pytest
from youkhana.adapters.audit import AuditLogger
from youkhana.adapters.auth import (
    InvitationConfig,
    InvitationManager,
    UserDirectory,
    UserDirectoryConfig,
)
from youkhana.adapters.catalog import InquiryRepository, ProductRepository
from youkhana.adapters.kv import KeyValueStore
from youkhana.core.auth.types import SessionUser
from youkhana.core.rbac import Role
from youkhana.safety.rate_limit import RateLimiter

from tests.helpers import ADMIN_EMAIL, MASTER_EMAIL, MEMBER_EMAIL, FakeClock


@pytest.fixture
def anyio_backend() -> str:
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def redis_client() -> fakeredis.FakeAsyncRedis:
    """In-memory store client. Each test gets its own server."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(redis_client: fakeredis.FakeAsyncRedis) -> KeyValueStore:
    return KeyValueStore(client=redis_client)


@pytest.fixture
def users(store: KeyValueStore, clock: FakeClock) -> UserDirectory:
    return UserDirectory(store, UserDirectoryConfig(master_admin_email=MASTER_EMAIL), clock)


@pytest.fixture
def invitations(store: KeyValueStore, users: UserDirectory, clock: FakeClock) -> InvitationManager:
    return InvitationManager(store, users, InvitationConfig(expiry_days=7), clock)


@pytest.fixture
def audit(store: KeyValueStore, clock: FakeClock) -> AuditLogger:
    return AuditLogger(store, clock=clock)


@pytest.fixture
def rate_limiter(store: KeyValueStore) -> RateLimiter:
    return RateLimiter(store)


@pytest.fixture
def products(store: KeyValueStore, clock: FakeClock) -> ProductRepository:
    return ProductRepository(store, clock)


@pytest.fixture
def inquiries(store: KeyValueStore, clock: FakeClock) -> InquiryRepository:
    return InquiryRepository(store, clock)


@pytest.fixture
def master_session() -> SessionUser:
    return SessionUser(email=MASTER_EMAIL, role=Role.MASTER_ADMIN, name="Master Admin")


@pytest.fixture
def admin_session() -> SessionUser:
    return SessionUser(email=ADMIN_EMAIL, role=Role.ADMIN, name="Admin")


@pytest.fixture
def member_session() -> SessionUser:
    return SessionUser(email=MEMBER_EMAIL, role=Role.MEMBER, name="Member")


@pytest.fixture
def product_fields() -> dict[str, object]:
    """Minimal valid product input, camelCase as the admin UI sends it."""
    return {
        "title": "Silk Slip Dress",
        "description": "Bias-cut silk dress in champagne.",
        "rentalPrice": {"daily": 45.0, "weekly": 250.0},
        "deposit": 100.0,
        "totalQuantity": 2,
        "availableQuantity": 2,
        "category": "Dresses",
        "tags": ["silk", "evening"],
        "status": "active",
    }
