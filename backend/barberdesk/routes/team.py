# Overview: Flask API routes for the team page; staff listing, creation and working hours.

"""
Team routes.

SECURITY:
- Listing requires VIEW_TEAM (barbers need it to pick a barber when booking)
- Adding staff and editing profiles require MANAGE_TEAM (admins only)
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..models import Profile
from ..services import team_service, permission_service
from ..services.tenant_service import TenantAccessError, require_in_org
from ..validation import ValidationError, ConflictError, FieldValidationError
from ..decorators import require_auth, require_permission

team_bp = Blueprint("team", __name__, url_prefix="/api/team")


@team_bp.get("")
@require_auth
@require_permission("VIEW_TEAM")
def list_team_route():
    members = team_service.list_team(g.org_id, search=request.args.get("search"))
    return {"items": members, "count": len(members)}


@team_bp.get("/barbers")
@require_auth
@require_permission("VIEW_TEAM")
def list_barbers_route():
    """Active staff for booking dropdowns."""
    barbers = team_service.list_barbers(g.org_id)
    return {"items": [{"id": b.id, "full_name": b.full_name} for b in barbers]}


@team_bp.post("")
@require_auth
@require_permission("MANAGE_TEAM")
def create_member_route():
    """
    Body: {email, password, full_name, phone?, commission_rate?, working_hours?}

    Creates a login for the new barber inside the caller's organization.
    """
    payload = request.get_json(silent=True) or {}
    try:
        member = team_service.create_barber(g.org_id, payload)
    except FieldValidationError as e:
        db.session.rollback()
        return {"error": "Validation failed", "fields": e.fields}, 400
    except ValidationError as e:
        db.session.rollback()
        return {"error": str(e)}, 400
    except ConflictError as e:
        db.session.rollback()
        return {"error": str(e)}, 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create team member")
        return {"error": "Internal server error"}, 500

    permission_service.log_security_event(
        user_id=g.current_user.id,
        org_id=g.org_id,
        event_type="TEAM_MEMBER_CREATED",
        success=True,
        resource=f"/api/team/{member['id']}",
        action="POST",
    )
    return member, 201


@team_bp.patch("/<int:profile_id>")
@require_auth
@require_permission("MANAGE_TEAM")
def update_member_route(profile_id: int):
    """Body: any of {full_name, phone, commission_rate, is_active, working_hours}"""
    payload = request.get_json(silent=True) or {}
    try:
        return team_service.update_member(g.org_id, profile_id, payload, acting_profile_id=g.profile.id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Profile not found"}, 404


@team_bp.patch("/<int:profile_id>/working-hours/<day>")
@require_auth
@require_permission("MANAGE_TEAM")
def update_working_day_route(profile_id: int, day: str):
    """
    Body: {enabled: bool} to switch a day on (default hours) or off,
    or {field: "start"|"end", value: "HH:MM"} to edit one bound.
    """
    payload = request.get_json(silent=True) or {}
    try:
        profile = require_in_org(Profile, profile_id, g.org_id, label="Profile")
        if "enabled" in payload:
            hours = team_service.toggle_day(profile.working_hours, day, bool(payload["enabled"]))
        elif "field" in payload:
            hours = team_service.set_day_field(profile.working_hours, day, payload["field"], payload.get("value"))
        else:
            raise ValidationError("Provide 'enabled' or 'field' and 'value'")
        return team_service.update_member(g.org_id, profile_id, {"working_hours": hours}, acting_profile_id=g.profile.id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Profile not found"}, 404
