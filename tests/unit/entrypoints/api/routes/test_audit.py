"""Tests for audit log routes."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from youkhana.core.auth.types import SessionUser
from youkhana.services.gate import ActionResult


class TestAuditRoutes:
    """Test GET /api/audit-logs."""

    def test_passes_filters(
        self, client: TestClient, services: SimpleNamespace, signed_in: SessionUser
    ) -> None:
        services.audit.list_audit_logs = AsyncMock(return_value=ActionResult.ok("ok", []))

        response = client.get(
            "/api/audit-logs",
            params={"limit": 10, "category": "authentication", "user_email": "a@b.co"},
        )

        assert response.status_code == 200
        services.audit.list_audit_logs.assert_awaited_once_with(
            signed_in, 10, "authentication", "a@b.co"
        )

    def test_defaults(
        self, client: TestClient, services: SimpleNamespace, signed_in: SessionUser
    ) -> None:
        services.audit.list_audit_logs = AsyncMock(return_value=ActionResult.ok("ok", []))

        client.get("/api/audit-logs")

        services.audit.list_audit_logs.assert_awaited_once_with(signed_in, 50, None, None)

    def test_limit_bounds(self, client: TestClient, signed_in: SessionUser) -> None:
        """Should reject limits outside 1..100 before reaching the service."""
        assert client.get("/api/audit-logs", params={"limit": 0}).status_code == 422
        assert client.get("/api/audit-logs", params={"limit": 101}).status_code == 422
