# Overview: Flask API routes for clients operations; parses input and returns JSON responses.

"""
Client roster routes.

MULTI-TENANT: All client operations are scoped to g.org_id.

SECURITY:
- Read operations require VIEW_CLIENTS
- Create/update require MANAGE_CLIENTS
- Delete requires DELETE_CLIENTS (admins only)
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..models import Client
from ..services import clients_service
from ..services.tenant_service import TenantAccessError
from ..validation import (
    validate_payload,
    enforce_rules_client,
    ValidationError,
    ConflictError,
)
from ..decorators import require_auth, require_permission

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@require_auth
@require_permission("VIEW_CLIENTS")
def list_clients_route():
    """
    Query params:
    - search: str (optional) - case-insensitive name filter
    """
    clients = clients_service.list_clients(g.org_id, search=request.args.get("search"))
    return {"items": [c.to_dict() for c in clients], "count": len(clients)}


@clients_bp.post("")
@require_auth
@require_permission("MANAGE_CLIENTS")
def create_client_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Client, payload=payload, policy=clients_service.CLIENT_POLICY, partial=False)
        enforce_rules_client(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        client = clients_service.create_client(g.org_id, patch, g.profile.id)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create client")
        return {"error": "Internal server error"}, 500
    return client.to_dict(), 201


@clients_bp.get("/<int:client_id>")
@require_auth
@require_permission("VIEW_CLIENTS")
def get_client_route(client_id: int):
    try:
        return clients_service.get_client(g.org_id, client_id).to_dict()
    except TenantAccessError:
        return {"error": "Client not found"}, 404


@clients_bp.put("/<int:client_id>")
@require_auth
@require_permission("MANAGE_CLIENTS")
def update_client_route(client_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Client, payload=payload, policy=clients_service.CLIENT_POLICY, partial=True)
        enforce_rules_client(patch)
        client = clients_service.update_client(g.org_id, client_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Client not found"}, 404
    return client.to_dict()


@clients_bp.delete("/<int:client_id>")
@require_auth
@require_permission("DELETE_CLIENTS")
def delete_client_route(client_id: int):
    try:
        clients_service.delete_client(g.org_id, client_id)
    except TenantAccessError:
        return {"error": "Client not found"}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    return {"ok": True}, 200


@clients_bp.get("/<int:client_id>/history")
@require_auth
@require_permission("VIEW_CLIENTS")
def client_history_route(client_id: int):
    """The client's appointments, newest first."""
    try:
        appointments = clients_service.client_history(g.org_id, client_id)
    except TenantAccessError:
        return {"error": "Client not found"}, 404
    return {"items": [a.to_dict() for a in appointments], "count": len(appointments)}
