"""Audit log repository backed by the key-value store.

Each entry is a JSON string at ``auditlog:{id}`` with a retention TTL, and
its id is added to three sorted sets scored by epoch millis:
``auditlogs:{category}``, ``auditlogs:user:{email}`` and ``auditlogs:all``.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from youkhana.adapters.audit.types import (
    AuditAction,
    AuditCategory,
    AuditLog,
    AuditLogCreate,
    AuditResult,
)
from youkhana.adapters.kv import KeyValueStore, keys
from youkhana.core.clock import Clock, epoch_millis, utcnow
from youkhana.core.errors import AdminError

logger = structlog.get_logger()

DEFAULT_RETENTION_DAYS = 90
MAX_QUERY_LIMIT = 100


@dataclass(frozen=True)
class AuditConfig:
    """Audit log configuration.

    Attributes:
        retention_days: TTL applied to entries and their indices.
        max_query_limit: Upper bound on entries returned by one query.
    """

    retention_days: int = DEFAULT_RETENTION_DAYS
    max_query_limit: int = MAX_QUERY_LIMIT

    @property
    def ttl_seconds(self) -> int:
        return self.retention_days * 24 * 60 * 60


def generate_log_id(now_millis: int) -> str:
    return f"audit_{now_millis}_{secrets.token_hex(6)}"


class AuditLogger:
    """Write-mostly, best-effort audit log.

    Write failures are logged and never raised, so a broken audit store
    cannot abort the action being audited.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: AuditConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the audit logger.

        Args:
            store: Key-value store adapter.
            config: Audit configuration.
            clock: Source of the current time.
        """
        self._store = store
        self.config = config or AuditConfig()
        self._clock = clock

    async def log_audit_event(self, entry: AuditLogCreate) -> AuditLog:
        """Record an audit event.

        Returns:
            The constructed entry, whether or not it was persisted.
        """
        now = self._clock()
        score = epoch_millis(now)
        log = AuditLog(id=generate_log_id(score), timestamp=now, **entry.model_dump())

        ttl = self.config.ttl_seconds
        try:
            await self._store.setex(
                keys.audit_log(log.id),
                ttl,
                log.model_dump_json(by_alias=True, exclude_none=True),
            )
            for index in (
                keys.audit_logs_by_category(log.category.value),
                keys.audit_logs_by_user(log.performed_by),
                keys.AUDIT_LOGS_ALL,
            ):
                await self._store.zadd(index, log.id, score)
                await self._store.expire(index, ttl)
        except Exception:
            logger.exception("audit_log_write_failed", action=log.action.value, log_id=log.id)

        return log

    async def get_audit_logs(
        self,
        limit: int = 50,
        category: AuditCategory | str | None = None,
        user_email: str | None = None,
    ) -> list[AuditLog]:
        """Get the most recent audit logs, newest first.

        Exactly one index is read, by specificity: user_email, then
        category, then the global index.

        Args:
            limit: Maximum entries, capped at ``max_query_limit``.
            category: Optional category filter.
            user_email: Optional performer filter.
        """
        safe_limit = min(limit, self.config.max_query_limit)
        if safe_limit <= 0:
            return []

        if user_email:
            index = keys.audit_logs_by_user(user_email)
        elif category:
            index = keys.audit_logs_by_category(AuditCategory(category).value)
        else:
            index = keys.AUDIT_LOGS_ALL

        try:
            log_ids = await self._store.zrange(index, 0, safe_limit - 1, desc=True)
            logs: list[AuditLog] = []
            for log_id in log_ids:
                log = await self.get_audit_log(log_id)
                if log is not None:
                    logs.append(log)
            return logs
        except AdminError as e:
            logger.error("audit_log_query_failed", index=index, error=e.message)
            return []

    async def get_audit_log(self, log_id: str) -> AuditLog | None:
        """Get one entry. Missing or unparseable entries return None."""
        raw = await self._store.get(keys.audit_log(log_id))
        if not raw:
            return None

        try:
            return AuditLog.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("audit_log_unparseable", log_id=log_id)
            return None

    async def get_audit_logs_by_action(
        self, action: AuditAction | str, limit: int = 50
    ) -> list[AuditLog]:
        """Filter the most recent global window by action."""
        wanted = AuditAction(action)
        logs = await self.get_audit_logs(self.config.max_query_limit)
        return [log for log in logs if log.action is wanted][:limit]

    async def get_audit_logs_by_resource(self, resource: str, limit: int = 50) -> list[AuditLog]:
        """Filter the most recent global window by resource."""
        logs = await self.get_audit_logs(self.config.max_query_limit)
        return [log for log in logs if log.resource == resource][:limit]

    async def cleanup_old_audit_logs(self, older_than_days: int) -> int:
        """Delete entries older than the cutoff.

        Redundant with TTL expiry; used for immediate cleanup.

        Returns:
            Number of entries removed from the global index.
        """
        cutoff = epoch_millis(self._clock() - timedelta(days=older_than_days))

        try:
            old_ids = await self._store.zrangebyscore(keys.AUDIT_LOGS_ALL, 0, cutoff)
            if not old_ids:
                return 0

            for log_id in old_ids:
                log = await self.get_audit_log(log_id)
                if log is not None:
                    await self._store.zrem(
                        keys.audit_logs_by_category(log.category.value), log_id
                    )
                    await self._store.zrem(keys.audit_logs_by_user(log.performed_by), log_id)
                await self._store.delete(keys.audit_log(log_id))

            await self._store.zremrangebyscore(keys.AUDIT_LOGS_ALL, 0, cutoff)
        except AdminError as e:
            logger.error("audit_log_cleanup_failed", error=e.message)
            return 0

        logger.info("audit_logs_cleaned", count=len(old_ids), older_than_days=older_than_days)
        return len(old_ids)

    async def log_user_action(
        self,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        resource: str,
        result: AuditResult,
        details: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> AuditLog:
        return await self._log(
            AuditCategory.USER_MANAGEMENT,
            action,
            performed_by,
            performed_by_role,
            resource,
            result,
            details,
            error_message,
        )

    async def log_invitation_action(
        self,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        resource: str,
        result: AuditResult,
        details: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> AuditLog:
        return await self._log(
            AuditCategory.INVITATION_MANAGEMENT,
            action,
            performed_by,
            performed_by_role,
            resource,
            result,
            details,
            error_message,
        )

    async def log_auth_action(
        self,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        result: AuditResult,
        details: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> AuditLog:
        """Auth entries use the performer as the resource."""
        return await self._log(
            AuditCategory.AUTHENTICATION,
            action,
            performed_by,
            performed_by_role,
            performed_by,
            result,
            details,
            error_message,
        )

    async def log_product_action(
        self,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        resource: str,
        result: AuditResult,
        details: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> AuditLog:
        return await self._log(
            AuditCategory.PRODUCT_MANAGEMENT,
            action,
            performed_by,
            performed_by_role,
            resource,
            result,
            details,
            error_message,
        )

    async def log_inquiry_action(
        self,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        resource: str,
        result: AuditResult,
        details: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> AuditLog:
        return await self._log(
            AuditCategory.INQUIRY_MANAGEMENT,
            action,
            performed_by,
            performed_by_role,
            resource,
            result,
            details,
            error_message,
        )

    async def _log(
        self,
        category: AuditCategory,
        action: AuditAction,
        performed_by: str,
        performed_by_role: str,
        resource: str,
        result: AuditResult,
        details: dict[str, Any] | None,
        error_message: str | None,
    ) -> AuditLog:
        return await self.log_audit_event(
            AuditLogCreate(
                performed_by=performed_by,
                performed_by_role=performed_by_role,
                action=action,
                category=category,
                resource=resource,
                result=result,
                details=details,
                error_message=error_message,
            )
        )
