# Overview: Flask API routes for the service catalog; parses input and returns JSON responses.

"""
Service catalog routes.

SECURITY:
- Read operations require VIEW_CATALOG
- Write operations require MANAGE_CATALOG (admins only)
"""
from flask import Blueprint, request, g

from ..models import Service
from ..services import catalog_service
from ..services.tenant_service import TenantAccessError
from ..validation import (
    validate_payload,
    enforce_rules_service,
    ValidationError,
    ConflictError,
)
from ..decorators import require_auth, require_permission

catalog_bp = Blueprint("services", __name__, url_prefix="/api/services")


@catalog_bp.get("")
@require_auth
@require_permission("VIEW_CATALOG")
def list_services_route():
    """
    Query params:
    - search: str (optional)
    - category: hair|beard|combo|other|all (optional)
    - active: "1" to hide inactive services (booking form)
    - grouped: "1" to bucket results by category
    """
    services = catalog_service.list_services(
        g.org_id,
        search=request.args.get("search"),
        category=request.args.get("category"),
        active_only=request.args.get("active") == "1",
    )
    if request.args.get("grouped") == "1":
        return {"groups": catalog_service.group_by_category(services), "count": len(services)}
    return {"items": [s.to_dict() for s in services], "count": len(services)}


@catalog_bp.post("")
@require_auth
@require_permission("MANAGE_CATALOG")
def create_service_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Service, payload=payload, policy=catalog_service.SERVICE_POLICY, partial=False)
        enforce_rules_service(patch)
        service = catalog_service.create_service(g.org_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    return service.to_dict(), 201


@catalog_bp.put("/<int:service_id>")
@require_auth
@require_permission("MANAGE_CATALOG")
def update_service_route(service_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Service, payload=payload, policy=catalog_service.SERVICE_POLICY, partial=True)
        enforce_rules_service(patch)
        service = catalog_service.update_service(g.org_id, service_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Service not found"}, 404
    return service.to_dict()


@catalog_bp.delete("/<int:service_id>")
@require_auth
@require_permission("MANAGE_CATALOG")
def delete_service_route(service_id: int):
    try:
        catalog_service.delete_service(g.org_id, service_id)
    except TenantAccessError:
        return {"error": "Service not found"}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    return {"ok": True}, 200
