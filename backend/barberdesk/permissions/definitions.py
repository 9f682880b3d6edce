# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- AGENDA --

AGENDA_PERMISSIONS = [
    (
        "VIEW_AGENDA",
        "View Agenda",
        "View appointments (barbers only see their own)",
        PermissionCategory.AGENDA,
    ),
    (
        "MANAGE_APPOINTMENTS",
        "Manage Appointments",
        "Book, reschedule, change status of and delete appointments",
        PermissionCategory.AGENDA,
    ),
    (
        "VIEW_ALL_APPOINTMENTS",
        "View All Appointments",
        "See and change appointments of every barber in the shop",
        PermissionCategory.AGENDA,
    ),
]

# -- CLIENTS --

CLIENT_PERMISSIONS = [
    (
        "VIEW_CLIENTS",
        "View Clients",
        "View the client roster and client history",
        PermissionCategory.CLIENTS,
    ),
    (
        "MANAGE_CLIENTS",
        "Manage Clients",
        "Create and edit clients",
        PermissionCategory.CLIENTS,
    ),
    (
        "DELETE_CLIENTS",
        "Delete Clients",
        "Permanently delete clients",
        PermissionCategory.CLIENTS,
    ),
]

# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_CATALOG",
        "View Services",
        "View the service catalog",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_CATALOG",
        "Manage Services",
        "Create, edit and delete services",
        PermissionCategory.CATALOG,
    ),
]

# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_INVENTORY",
        "View Products",
        "View products, stock levels and stock movement history",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create, edit and deactivate products",
        PermissionCategory.INVENTORY,
    ),
    (
        "RECORD_STOCK_MOVEMENT",
        "Record Stock Movement",
        "Record stock in, out and adjustment movements",
        PermissionCategory.INVENTORY,
    ),
]

# -- TEAM --

TEAM_PERMISSIONS = [
    (
        "VIEW_TEAM",
        "View Team",
        "View staff profiles and working hours",
        PermissionCategory.TEAM,
    ),
    (
        "MANAGE_TEAM",
        "Manage Team",
        "Add barbers and edit commission, status and working hours",
        PermissionCategory.TEAM,
    ),
]

# -- FINANCE --

FINANCE_PERMISSIONS = [
    (
        "VIEW_FINANCE",
        "View Finance",
        "View revenue, commissions and expense totals",
        PermissionCategory.FINANCE,
    ),
    (
        "MANAGE_EXPENSES",
        "Manage Expenses",
        "Create, edit and delete expenses",
        PermissionCategory.FINANCE,
    ),
]

# -- ORGANIZATION --

ORGANIZATION_PERMISSIONS = [
    (
        "MANAGE_ORGANIZATION",
        "Manage Organization",
        "Edit barbershop name, contact details and timezone",
        PermissionCategory.ORGANIZATION,
    ),
    (
        "MANAGE_INTEGRATIONS",
        "Manage Integrations",
        "Configure and test the outbound webhook",
        PermissionCategory.ORGANIZATION,
    ),
]


PERMISSION_DEFINITIONS = (
    AGENDA_PERMISSIONS
    + CLIENT_PERMISSIONS
    + CATALOG_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + TEAM_PERMISSIONS
    + FINANCE_PERMISSIONS
    + ORGANIZATION_PERMISSIONS
)
