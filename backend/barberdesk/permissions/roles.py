# Overview: Default permission sets for the two built-in roles.

from .definitions import PERMISSION_DEFINITIONS

ROLE_ADMIN = "admin"
ROLE_BARBER = "barber"
ROLES = (ROLE_ADMIN, ROLE_BARBER)


DEFAULT_ROLE_PERMISSIONS = {
    # Shop owner: everything
    ROLE_ADMIN: [perm[0] for perm in PERMISSION_DEFINITIONS],
    # Barber: own agenda, clients (no delete), read-only catalog/stock/team
    ROLE_BARBER: [
        "VIEW_AGENDA",
        "MANAGE_APPOINTMENTS",
        "VIEW_CLIENTS",
        "MANAGE_CLIENTS",
        "VIEW_CATALOG",
        "VIEW_INVENTORY",
        "VIEW_TEAM",
    ],
}
