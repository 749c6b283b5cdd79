"""Fixtures for route tests: a bare app with every service mocked."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from youkhana.core.auth.types import SessionUser
from youkhana.entrypoints.api.deps import (
    get_audit_service,
    get_auth_service,
    get_components,
    get_inquiry_service,
    get_invitation_service,
    get_product_service,
    get_user_service,
)
from youkhana.entrypoints.api.middleware import get_session
from youkhana.entrypoints.api.routes import api_router


@pytest.fixture
def services() -> SimpleNamespace:
    """One MagicMock per service; tests attach AsyncMock methods as needed."""
    return SimpleNamespace(
        auth=MagicMock(),
        users=MagicMock(),
        invitations=MagicMock(),
        audit=MagicMock(),
        products=MagicMock(),
        inquiries=MagicMock(),
        components=MagicMock(),
    )


@pytest.fixture
def app(services: SimpleNamespace) -> FastAPI:
    """Create test app with the API router and mocked services."""
    app = FastAPI()
    app.include_router(api_router, prefix="/api")
    app.dependency_overrides[get_auth_service] = lambda: services.auth
    app.dependency_overrides[get_user_service] = lambda: services.users
    app.dependency_overrides[get_invitation_service] = lambda: services.invitations
    app.dependency_overrides[get_audit_service] = lambda: services.audit
    app.dependency_overrides[get_product_service] = lambda: services.products
    app.dependency_overrides[get_inquiry_service] = lambda: services.inquiries
    app.dependency_overrides[get_components] = lambda: services.components
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def signed_in(app: FastAPI, admin_session: SessionUser) -> SessionUser:
    """Resolve every request to the admin session."""
    app.dependency_overrides[get_session] = lambda: admin_session
    return admin_session
