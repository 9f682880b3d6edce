# Overview: Flask API routes for onboarding; creates the caller's barbershop.

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import db
from ..services import onboarding_service
from ..validation import ConflictError, FieldValidationError
from ..decorators import require_login


onboarding_bp = Blueprint("onboarding", __name__, url_prefix="/api/onboarding")


@onboarding_bp.get("/slug")
@require_login
def suggest_slug_route():
    """Slug the form pre-fills from the shop name."""
    return jsonify({"slug": onboarding_service.slugify(request.args.get("name", ""))}), 200


@onboarding_bp.post("")
@require_login
def onboarding_route():
    """
    Create organization, admin profile and admin role for the caller.

    Body: {organization_name, slug?, organization_phone?, address?, full_name, phone?}
    The caller's current token is bound to the new organization.
    """
    payload = request.get_json(silent=True) or {}
    try:
        org, profile = onboarding_service.complete_onboarding(
            user=g.current_user,
            session=g.session_context.session,
            payload=payload,
        )
    except FieldValidationError as e:
        return jsonify({"error": "Validation failed", "fields": e.fields}), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to complete onboarding")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "organization": org.to_dict(),
        "profile": profile.to_dict(),
        "role": "admin",
    }), 201
