"""
Multi-Tenant Service: Tenant Validation and Scoping Helpers

WHY: Centralize tenant validation logic for reuse across services and routes.
Every request must be scoped to a tenant (organization), and cross-tenant
access must be explicitly denied.

SECURITY INVARIANTS:
1. Every authenticated request has g.org_id set
2. Row ids from client input must be validated against g.org_id
3. Cross-tenant access attempts are logged as security events
4. A row in another organization is reported as "not found"

USAGE:
    from barberdesk.services.tenant_service import require_in_org, scoped_query

    client = require_in_org(Client, client_id, g.org_id)
    services = scoped_query(Service, g.org_id).filter_by(is_active=True).all()
"""

from flask import g, has_request_context, request
from ..extensions import db
from ..models import Organization
from ..validation import ValidationError
from .permission_service import log_security_event


class TenantAccessError(Exception):
    """Raised when cross-tenant access is attempted."""
    pass


def get_current_org_id() -> int:
    """
    Get current tenant's org_id from Flask g context.

    SECURITY: Raises TenantAccessError if org_id not set.
    This should never happen after @require_auth, but is a safety check.
    """
    if not hasattr(g, 'org_id') or g.org_id is None:
        raise TenantAccessError("Tenant context not established")
    return g.org_id


def get_org(org_id: int) -> Organization:
    org = db.session.get(Organization, org_id)
    if org is None:
        raise TenantAccessError("Organization not found")
    return org


def scoped_query(model, org_id: int = None):
    """
    Create a base query scoped to the tenant via the model's org_id column.

    Usage:
        products = scoped_query(Product).filter_by(is_active=True).all()
    """
    if org_id is None:
        org_id = get_current_org_id()
    return db.session.query(model).filter(model.org_id == org_id)


def _coerce_id(row_id, label: str) -> int | None:
    """Ids arrive from JSON as ints or digit strings; anything else is a 400."""
    if row_id is None or (isinstance(row_id, int) and not isinstance(row_id, bool)):
        return row_id
    if isinstance(row_id, str) and row_id.strip().isdecimal():
        try:
            return int(row_id.strip())
        except ValueError:
            pass
    raise ValidationError(f"{label} id must be an integer")


def require_in_org(model, row_id, org_id: int, *, label: str | None = None, query=None):
    """
    Load a tenant-owned row, refusing rows that belong to another organization.

    SECURITY: Core tenant isolation check. Call this before any operation
    that uses a row id from client input.

    Args:
        model: SQLAlchemy model class with an org_id column
        row_id: The id to load (typically from the URL or payload)
        org_id: The caller's organization (typically g.org_id)
        label: Human name for error messages (defaults to the class name)
        query: Optional pre-built query (e.g. with row locking applied)

    Raises:
        ValidationError if row_id is not an integer id
        TenantAccessError if the row doesn't exist or belongs to another org
    """
    label = label or model.__name__
    row_id = _coerce_id(row_id, label)
    if query is None:
        query = db.session.query(model)
    row = query.filter(model.id == row_id).first() if row_id is not None else None

    if row is None:
        raise TenantAccessError(f"{label} not found")

    if row.org_id != org_id:
        # CRITICAL: Cross-tenant access attempt
        _log_cross_tenant_attempt(
            f"{label} {row_id} belongs to org {row.org_id}, not {org_id}",
            org_id=org_id,
        )
        raise TenantAccessError(f"{label} not found")  # Don't reveal it exists in another org

    return row


def _log_cross_tenant_attempt(reason: str, org_id: int | None = None) -> None:
    """
    Log a cross-tenant access attempt as a security event.

    SECURITY: Critical audit trail for detecting unauthorized access attempts.
    """
    user = getattr(g, 'current_user', None) if has_request_context() else None
    in_request = has_request_context()

    log_security_event(
        user_id=user.id if user is not None else None,
        event_type="CROSS_TENANT_ACCESS_DENIED",
        success=False,
        resource=request.path if in_request else None,
        action=request.method if in_request else None,
        reason=reason,
        ip_address=request.remote_addr if in_request else None,
        user_agent=request.headers.get("User-Agent") if in_request else None,
        org_id=org_id,
    )
