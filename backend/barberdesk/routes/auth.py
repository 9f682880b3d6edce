# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/barberdesk/routes/auth.py
"""
Authentication API routes

- Self sign-up creates a login identity only; the barbershop is created
  afterwards through /api/onboarding.
- Login returns a bearer token plus whether onboarding is still needed.
- is-admin / has-role / has-permission are the checks the front end calls to decide
  which screens to show. They are conveniences; every data route checks
  permissions again server-side.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import db
from ..permissions import (
    ROLES,
    PermissionCategory,
    get_permission_definition,
    get_permissions_by_category,
    validate_permission_code,
)
from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..validation import ConflictError, FieldValidationError
from ..decorators import require_login


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _identity_payload(user, org_id, profile) -> dict:
    role = permission_service.get_user_role(user.id, org_id) if org_id else None
    return {
        "user": user.to_dict(),
        "profile": profile.to_dict() if profile else None,
        "org_id": org_id,
        "role": role,
        "is_admin": role == "admin",
        "permissions": sorted(permission_service.get_user_permissions(user.id, org_id)) if org_id else [],
        "needs_onboarding": profile is None,
    }


@auth_bp.post("/register")
def register_route():
    """
    Self sign-up.

    Body: {email, password, full_name}
    Returns 201 with the user and a session token (onboarding pending).
    """
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.register_user(
            data.get("email"),
            data.get("password"),
            data.get("full_name"),
        )
        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
    except FieldValidationError as e:
        return jsonify({"error": "Validation failed", "fields": e.fields}), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "token": token,
        "session": session.to_dict(),
        **_identity_payload(user, None, None),
    }), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user_agent = request.headers.get("User-Agent")
        ip_address = request.remote_addr

        user = auth_service.authenticate(email, password)

        if not user:
            permission_service.log_security_event(
                user_id=None,
                event_type="LOGIN_FAILED",
                success=False,
                resource=request.path,
                action="LOGIN",
                reason="Invalid credentials",
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return jsonify({"error": "Invalid credentials"}), 401

        try:
            session, token = session_service.create_session(
                user_id=user.id,
                user_agent=user_agent,
                ip_address=ip_address
            )
        except ValueError as e:
            return jsonify({"error": str(e)}), 403

        return jsonify({
            "token": token,
            "session": session.to_dict(),
            **_identity_payload(user, session.org_id, user.profile),
            "message": "Login successful"
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_login
def logout_route():
    session_service.revoke_session(g.auth_token, reason="User logout")
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_login
def me_route():
    """Current identity; profile is null until onboarding is done."""
    return jsonify(_identity_payload(g.current_user, g.org_id, g.profile)), 200


@auth_bp.get("/is-admin")
@require_login
def is_admin_route():
    return jsonify({"is_admin": permission_service.is_admin(g.current_user.id, g.org_id)}), 200


@auth_bp.get("/has-role/<role>")
@require_login
def has_role_route(role: str):
    if role not in ROLES:
        return jsonify({"error": f"Unknown role: {role}"}), 400
    return jsonify({
        "role": role,
        "has_role": permission_service.has_role(g.current_user.id, g.org_id, role),
    }), 200


@auth_bp.get("/has-permission/<code>")
@require_login
def has_permission_route(code: str):
    if not validate_permission_code(code):
        return jsonify({"error": f"Unknown permission: {code}"}), 400
    granted = bool(g.org_id) and permission_service.user_has_permission(g.current_user.id, code, g.org_id)
    return jsonify({"permission": code, "has_permission": granted}), 200


@auth_bp.get("/permissions")
@require_login
def permissions_route():
    """Every permission grouped by category, flagged with whether the caller holds it."""
    held = permission_service.get_user_permissions(g.current_user.id, g.org_id) if g.org_id else set()
    categories = {}
    for category in sorted(v for k, v in vars(PermissionCategory).items() if k.isupper()):
        categories[category] = [
            {**get_permission_definition(perm[0]), "granted": perm[0] in held}
            for perm in get_permissions_by_category(category)
        ]
    return jsonify({"categories": categories}), 200
