"""Out-of-band provisioning of the master admin account."""

from __future__ import annotations

import structlog

from youkhana.adapters.auth import UserDirectory
from youkhana.adapters.kv import KeyValueStore, keys
from youkhana.core.auth.types import User
from youkhana.core.clock import Clock, utcnow
from youkhana.core.errors import ConflictError, ValidationError
from youkhana.core.rbac import Role

logger = structlog.get_logger()

MASTER_ADMIN_NAME = "Master Admin"
SYSTEM_INVITER = "system"


async def create_master_admin(
    store: KeyValueStore,
    email: str,
    force: bool = False,
    clock: Clock = utcnow,
) -> User:
    """Create the master admin user directly in the store.

    This is the only way a MASTER_ADMIN comes into existence; the
    invitation flow refuses that role.

    Args:
        store: Key-value store adapter.
        email: Master admin email address.
        force: Replace an existing record for this email.
        clock: Source of the current time.

    Raises:
        ValidationError: If email is empty.
        ConflictError: If the user exists and ``force`` is not set.
    """
    email = email.strip().lower()
    if not email:
        raise ValidationError("MASTER_ADMIN_EMAIL is required")

    # No master email configured here, so the directory's own protection
    # does not block re-provisioning.
    directory = UserDirectory(store, clock=clock)

    existing = await directory.get_user(email)
    if existing is not None:
        if not force:
            raise ConflictError("Master admin user already exists")
        logger.warning("master_admin_replaced", email=email, previous_role=existing.role.value)
        await store.delete(keys.user(email))

    user = await directory.create_user(
        email, MASTER_ADMIN_NAME, Role.MASTER_ADMIN, invited_by=SYSTEM_INVITER
    )
    logger.info("master_admin_created", email=email)
    return user
