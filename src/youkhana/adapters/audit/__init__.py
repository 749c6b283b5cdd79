"""Audit logging adapter."""

from youkhana.adapters.audit.repository import AuditConfig, AuditLogger
from youkhana.adapters.audit.types import (
    AuditAction,
    AuditCategory,
    AuditLog,
    AuditLogCreate,
    AuditResult,
)

__all__ = [
    "AuditAction",
    "AuditCategory",
    "AuditConfig",
    "AuditLog",
    "AuditLogCreate",
    "AuditLogger",
    "AuditResult",
]
