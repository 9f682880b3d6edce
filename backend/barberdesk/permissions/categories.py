# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    AGENDA = "AGENDA"
    CLIENTS = "CLIENTS"
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    TEAM = "TEAM"
    FINANCE = "FINANCE"
    ORGANIZATION = "ORGANIZATION"
