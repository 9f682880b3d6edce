# Overview: Permission system package.
# Re-exports all public APIs for imports from the package root.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    AGENDA_PERMISSIONS,
    CLIENT_PERMISSIONS,
    CATALOG_PERMISSIONS,
    INVENTORY_PERMISSIONS,
    TEAM_PERMISSIONS,
    FINANCE_PERMISSIONS,
    ORGANIZATION_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS, ROLES, ROLE_ADMIN, ROLE_BARBER
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "AGENDA_PERMISSIONS",
    "CLIENT_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "INVENTORY_PERMISSIONS",
    "TEAM_PERMISSIONS",
    "FINANCE_PERMISSIONS",
    "ORGANIZATION_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_BARBER",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
]
