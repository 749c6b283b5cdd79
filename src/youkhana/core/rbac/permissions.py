"""Permission lookups over the static role table.

Pure functions, no I/O. Anything that is not a known role is treated as
having no permissions.
"""

from collections.abc import Iterable

from youkhana.core.rbac.types import (
    ROLE_DESCRIPTIONS,
    ROLE_HIERARCHY,
    ROLE_LABELS,
    ROLE_PERMISSIONS,
    Permission,
    Role,
)


def coerce_role(candidate: object) -> Role | None:
    """Return the Role for a candidate value, or None if it is not one."""
    if isinstance(candidate, Role):
        return candidate
    if isinstance(candidate, str):
        try:
            return Role(candidate)
        except ValueError:
            return None
    return None


def is_valid_role(candidate: object) -> bool:
    """Check membership in the fixed role enumeration."""
    return coerce_role(candidate) is not None


def has_permission(role: Role | str | None, permission: Permission) -> bool:
    """Check if a role grants a permission. Unknown roles fail closed."""
    resolved = coerce_role(role)
    if resolved is None:
        return False
    return permission in ROLE_PERMISSIONS.get(resolved, frozenset())


def has_any_permission(role: Role | str | None, permissions: Iterable[Permission]) -> bool:
    """Check if a role grants at least one of the permissions."""
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: Role | str | None, permissions: Iterable[Permission]) -> bool:
    """Check if a role grants every one of the permissions."""
    return all(has_permission(role, p) for p in permissions)


def get_role_permissions(role: Role | str | None) -> frozenset[Permission]:
    """Get all permissions for a role."""
    resolved = coerce_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(resolved, frozenset())


def has_higher_or_equal_role(role_a: Role | str, role_b: Role | str) -> bool:
    """Check if role_a is at least as privileged as role_b.

    Raises:
        ValueError: If either role is not a known role.
    """
    return ROLE_HIERARCHY[Role(role_a)] >= ROLE_HIERARCHY[Role(role_b)]


def is_admin(role: Role | str | None) -> bool:
    """ADMIN or MASTER_ADMIN."""
    return coerce_role(role) in (Role.ADMIN, Role.MASTER_ADMIN)


def is_master_admin(role: Role | str | None) -> bool:
    return coerce_role(role) is Role.MASTER_ADMIN


def get_role_label(role: Role | str | None) -> str:
    resolved = coerce_role(role)
    return ROLE_LABELS[resolved] if resolved else "Unknown"


def get_role_description(role: Role | str | None) -> str:
    resolved = coerce_role(role)
    return ROLE_DESCRIPTIONS[resolved] if resolved else ""
