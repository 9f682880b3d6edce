# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Role Resolution, Permission Checking and Security Event Logging

WHY: Enforce role-based access control and create an audit trail.
A user holds one of two roles inside its organization (admin, barber);
each role maps to a static permission set (see permissions/roles.py).

MULTI-TENANT: Roles are looked up per (user_id, org_id). A role row in
another organization never grants anything here.

DESIGN PRINCIPLES:
- Fail closed: a user with no role row is a barber
- Log denials only: permission grants are not logged
"""

from ..extensions import db
from ..models import Profile, UserRole, SecurityEvent
from ..permissions import DEFAULT_ROLE_PERMISSIONS, ROLES, ROLE_ADMIN, ROLE_BARBER
from barberdesk.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    org_id: int | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail with tenant context.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - LOGOUT
    - ROLE_ASSIGNED
    - TENANT_CONTEXT_MISSING
    - CROSS_TENANT_ACCESS_DENIED
    """
    event = SecurityEvent(
        user_id=user_id,
        org_id=org_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_user_roles(user_id: int, org_id: int | None) -> set[str]:
    """Role names held by the user inside org_id."""
    if org_id is None:
        return set()
    rows = db.session.query(UserRole.role).filter_by(user_id=user_id, org_id=org_id).all()
    return {row[0] for row in rows}


def get_user_role(user_id: int, org_id: int | None) -> str:
    """Effective role: admin wins, otherwise barber."""
    roles = get_user_roles(user_id, org_id)
    return ROLE_ADMIN if ROLE_ADMIN in roles else ROLE_BARBER


def has_role(user_id: int, org_id: int | None, role: str) -> bool:
    return role in get_user_roles(user_id, org_id)


def is_admin(user_id: int, org_id: int | None) -> bool:
    return has_role(user_id, org_id, ROLE_ADMIN)


def assign_role(user_id: int, org_id: int, role: str) -> UserRole:
    """
    Give the user a role in the organization (idempotent).

    Caller owns the transaction: the row is added and flushed, not committed.
    """
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    existing = db.session.query(UserRole).filter_by(user_id=user_id, org_id=org_id, role=role).first()
    if existing:
        return existing

    user_role = UserRole(user_id=user_id, org_id=org_id, role=role)
    db.session.add(user_role)
    db.session.flush()
    return user_role


def _has_profile(user_id: int, org_id: int) -> bool:
    return db.session.query(Profile.id).filter_by(user_id=user_id, org_id=org_id).first() is not None


def get_user_permissions(user_id: int, org_id: int | None) -> set[str]:
    """
    Get all permission codes for a user inside an organization.

    Returns the union of the permission sets of the user's roles. Staff
    with a profile but no role row get the barber set; users with no
    profile in org_id get nothing.
    """
    roles = get_user_roles(user_id, org_id)
    if not roles:
        if org_id is None or not _has_profile(user_id, org_id):
            return set()
        roles = {ROLE_BARBER}
    permission_codes: set[str] = set()
    for role in roles:
        permission_codes.update(DEFAULT_ROLE_PERMISSIONS.get(role, []))
    return permission_codes


def user_has_permission(user_id: int, permission_code: str, org_id: int | None) -> bool:
    return permission_code in get_user_permissions(user_id, org_id)


def require_permission(
    user_id: int,
    permission_code: str,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    org_id: int | None = None,
) -> None:
    """
    Require user to have permission, raise PermissionDeniedError if not.

    Denials are written to security_events with the tenant context.
    """
    if not user_has_permission(user_id, permission_code, org_id):
        log_security_event(
            user_id=user_id,
            event_type="PERMISSION_DENIED",
            success=False,
            resource=resource,
            action=permission_code,
            reason=f"Missing permission: {permission_code}",
            ip_address=ip_address,
            user_agent=user_agent,
            org_id=org_id,
        )
        raise PermissionDeniedError(f"Permission denied: {permission_code}")
