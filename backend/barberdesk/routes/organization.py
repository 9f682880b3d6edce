# Overview: Flask API routes for barbershop settings and the caller's own profile.

from flask import Blueprint, request, g

from ..services import organization_service
from ..services.tenant_service import get_org
from ..validation import ValidationError
from ..decorators import require_auth, require_permission

organization_bp = Blueprint("organization", __name__, url_prefix="/api")


@organization_bp.get("/organization")
@require_auth
def get_organization_route():
    return {"organization": get_org(g.org_id).to_dict()}


@organization_bp.put("/organization")
@require_auth
@require_permission("MANAGE_ORGANIZATION")
def update_organization_route():
    try:
        org = organization_service.update_organization(get_org(g.org_id), request.get_json(silent=True) or {})
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"organization": org.to_dict()}


@organization_bp.get("/profile")
@require_auth
def get_profile_route():
    return {"profile": g.profile.to_dict(), "role": g.role}


@organization_bp.put("/profile")
@require_auth
def update_profile_route():
    """Caller edits their own display name, phone and avatar."""
    try:
        profile = organization_service.update_own_profile(g.profile, request.get_json(silent=True) or {})
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"profile": profile.to_dict(), "role": g.role}
