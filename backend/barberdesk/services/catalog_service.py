# backend/barberdesk/services/catalog_service.py
"""
Service catalog (haircuts, beard trims, combos).

Categories are a closed set; "all" in a filter means no filter.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Appointment, Service
from ..validation import ConflictError, ModelValidationPolicy, ValidationError
from .tenant_service import require_in_org, scoped_query

SERVICE_CATEGORIES = ("hair", "beard", "combo", "other")
DEFAULT_CATEGORY = "other"

SERVICE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price_cents", "duration_minutes", "commission_rate", "category", "is_active"},
    required_on_create={"name", "price_cents"},
    blank_to_null={"description"},
)


def validate_category(patch: dict) -> None:
    if "category" in patch and patch["category"] not in SERVICE_CATEGORIES:
        raise ValidationError(f"category must be one of: {', '.join(SERVICE_CATEGORIES)}")


def list_services(
    org_id: int,
    search: str | None = None,
    category: str | None = None,
    active_only: bool = False,
) -> list[Service]:
    query = scoped_query(Service, org_id)
    if search and search.strip():
        query = query.filter(Service.name.ilike(f"%{search.strip()}%"))
    if category and category != "all":
        query = query.filter(Service.category == category)
    if active_only:
        query = query.filter(Service.is_active.is_(True))
    return query.order_by(Service.name.asc(), Service.id.asc()).all()


def group_by_category(services: list[Service]) -> dict[str, list[dict]]:
    """Bucket services by category, keeping catalog order within a bucket."""
    grouped: dict[str, list[dict]] = {category: [] for category in SERVICE_CATEGORIES}
    for service in services:
        grouped.setdefault(service.category, []).append(service.to_dict())
    return grouped


def get_service(org_id: int, service_id: int) -> Service:
    return require_in_org(Service, service_id, org_id, label="Service")


def create_service(org_id: int, patch: dict) -> Service:
    validate_category(patch)
    patch.setdefault("category", DEFAULT_CATEGORY)
    patch.setdefault("duration_minutes", 30)
    service = Service(org_id=org_id, **patch)
    db.session.add(service)
    db.session.commit()
    return service


def update_service(org_id: int, service_id: int, patch: dict) -> Service:
    """Edits never touch existing appointments (price/duration are snapshotted)."""
    validate_category(patch)
    service = get_service(org_id, service_id)
    for key, value in patch.items():
        setattr(service, key, value)
    db.session.commit()
    return service


def delete_service(org_id: int, service_id: int) -> None:
    service = get_service(org_id, service_id)
    if db.session.query(Appointment.id).filter_by(org_id=org_id, service_id=service.id).first():
        raise ConflictError("Service has appointments; deactivate it instead")
    db.session.delete(service)
    db.session.commit()
