"""Invitation and audit log cleanup job.

Run via: python -m youkhana.jobs.cleanup
"""

import asyncio
import os

import structlog

from youkhana.adapters.audit import AuditConfig, AuditLogger
from youkhana.adapters.auth import InvitationConfig, InvitationManager, UserDirectory
from youkhana.adapters.kv import KeyValueStore

logger = structlog.get_logger()

RETENTION_DAYS = int(os.getenv("AUDIT_RETENTION_DAYS", "90"))
INVITATION_RETENTION_DAYS = int(os.getenv("INVITATION_RETENTION_DAYS", "90"))


async def run_cleanup(
    invitations: InvitationManager,
    audit: AuditLogger,
    retention_days: int = RETENTION_DAYS,
) -> dict[str, int]:
    """Expire overdue invitations and purge old audit entries.

    Returns:
        Counts of expired invitations and purged audit entries.
    """
    expired = await invitations.cleanup_expired_invitations()
    purged = await audit.cleanup_old_audit_logs(retention_days)

    logger.info(
        "cleanup_complete",
        expired_invitations=expired,
        purged_audit_logs=purged,
        retention_days=retention_days,
    )
    return {"expiredInvitations": expired, "purgedAuditLogs": purged}


async def main() -> None:
    """Run cleanup against the configured store."""
    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        logger.error("redis_url_not_set")
        return

    store = KeyValueStore(redis_url)
    await store.connect()

    try:
        users = UserDirectory(store)
        await run_cleanup(
            InvitationManager(
                store, users, InvitationConfig(retention_days=INVITATION_RETENTION_DAYS)
            ),
            AuditLogger(store, AuditConfig(retention_days=RETENTION_DAYS)),
        )
    finally:
        await store.close()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
