# Overview: Flask API routes for the outbound webhook integration.

"""
Integration routes (admins only, MANAGE_INTEGRATIONS).

One integration per organization: PUT creates it on first save.
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..services import integration_service
from ..services.integration_service import WebhookDispatchError
from ..validation import ValidationError
from ..decorators import require_auth, require_permission

integrations_bp = Blueprint("integrations", __name__, url_prefix="/api/integrations")


@integrations_bp.get("")
@require_auth
@require_permission("MANAGE_INTEGRATIONS")
def get_integration_route():
    integration = integration_service.get_integration(g.org_id)
    return {"integration": integration.to_dict() if integration else None}


@integrations_bp.put("")
@require_auth
@require_permission("MANAGE_INTEGRATIONS")
def save_integration_route():
    """Body: any of {webhook_url, api_key, is_active}"""
    payload = request.get_json(silent=True) or {}
    try:
        integration = integration_service.save_integration(g.org_id, payload, profile_id=g.profile.id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to save integration")
        return {"error": "Internal server error"}, 500
    return {"integration": integration.to_dict()}


@integrations_bp.post("/test")
@require_auth
@require_permission("MANAGE_INTEGRATIONS")
def test_integration_route():
    """
    Body: {webhook_url?}

    Sends the test payload to the given URL, or the saved one.
    - 400: no URL configured / invalid URL
    - 502: request could not be sent
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = integration_service.send_test_webhook(g.org_id, webhook_url=payload.get("webhook_url"))
    except WebhookDispatchError as e:
        return {"error": str(e)}, 502
    except ValueError as e:
        return {"error": str(e)}, 400
    return result
