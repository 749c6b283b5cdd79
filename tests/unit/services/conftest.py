"""Fixtures for service tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from youkhana.adapters.audit import AuditLogger
from youkhana.adapters.auth import InvitationManager, UserDirectory
from youkhana.adapters.catalog import InquiryRepository, ProductRepository
from youkhana.adapters.notifications import ConsoleAuthMailer
from youkhana.safety.rate_limit import RateLimiter
from youkhana.services import (
    AuditService,
    AuthService,
    InquiryService,
    InvitationService,
    ProductService,
    UserService,
)

from tests.helpers import AUTH_BASE_URL, SESSION_CONFIG, FakeClock


@pytest.fixture
def mailer() -> AsyncMock:
    """Mailer that reports every delivery as successful."""
    mock = AsyncMock(spec=ConsoleAuthMailer)
    mock.send_invitation.return_value = True
    mock.send_sign_in_link.return_value = True
    return mock


@pytest.fixture
def user_service(
    users: UserDirectory, audit: AuditLogger, rate_limiter: RateLimiter
) -> UserService:
    return UserService(users, audit, rate_limiter)


@pytest.fixture
def invitation_service(
    invitations: InvitationManager,
    audit: AuditLogger,
    rate_limiter: RateLimiter,
    mailer: AsyncMock,
) -> InvitationService:
    return InvitationService(invitations, audit, rate_limiter, mailer, AUTH_BASE_URL)


@pytest.fixture
def auth_service(
    users: UserDirectory,
    invitations: InvitationManager,
    audit: AuditLogger,
    mailer: AsyncMock,
) -> AuthService:
    return AuthService(users, invitations, audit, mailer, SESSION_CONFIG, AUTH_BASE_URL)


@pytest.fixture
def audit_service(audit: AuditLogger) -> AuditService:
    return AuditService(audit)


@pytest.fixture
def product_service(products: ProductRepository, audit: AuditLogger) -> ProductService:
    return ProductService(products, audit)


@pytest.fixture
def inquiry_service(
    inquiries: InquiryRepository,
    products: ProductRepository,
    audit: AuditLogger,
    clock: FakeClock,
) -> InquiryService:
    return InquiryService(inquiries, products, audit, clock)
