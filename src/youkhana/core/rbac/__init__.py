"""RBAC core domain."""

from youkhana.core.rbac.permissions import (
    coerce_role,
    get_role_description,
    get_role_label,
    get_role_permissions,
    has_all_permissions,
    has_any_permission,
    has_higher_or_equal_role,
    has_permission,
    is_admin,
    is_master_admin,
    is_valid_role,
)
from youkhana.core.rbac.types import (
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    Permission,
    Role,
)

__all__ = [
    "Permission",
    "ROLE_HIERARCHY",
    "ROLE_PERMISSIONS",
    "Role",
    "coerce_role",
    "get_role_description",
    "get_role_label",
    "get_role_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_higher_or_equal_role",
    "has_permission",
    "is_admin",
    "is_master_admin",
    "is_valid_role",
]
