# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return getattr(g, 'current_user', None) is not None and getattr(g, 'org_id', None) is not None


def _load_session():
    """Resolve the bearer token; returns (context, error_response)."""
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        return None, (jsonify({"error": "Authentication required"}), 401)

    token = auth_header.split(" ", 1)[1]
    context = session_service.validate_session(token)

    if not context:
        return None, (jsonify({"error": "Invalid or expired token"}), 401)

    g.current_user = context.user
    g.org_id = context.org_id
    g.profile = context.profile
    g.session_context = context
    g.auth_token = token
    return context, None


def require_login(f):
    """
    Require a valid session, with or without tenant context.

    Used by the endpoints a user needs before onboarding (me, logout,
    onboarding itself). g.org_id and g.profile may be None here.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _, error = _load_session()
        if error:
            return error
        return f(*args, **kwargs)

    return decorated_function


def require_auth(f):
    """
    Require authentication and establish tenant context.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.org_id: The organization ID (tenant context) - REQUIRED
    - g.profile: The caller's Profile inside that organization
    - g.role: "admin" or "barber"
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid or expired token
    - User, profile or organization deactivated
    - Session has no organization yet (onboarding not finished)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        context, error = _load_session()
        if error:
            return error

        if not context.org_id or context.profile is None:
            permission_service.log_security_event(
                user_id=context.user.id,
                event_type="TENANT_CONTEXT_MISSING",
                success=False,
                resource=request.path,
                action=request.method,
                reason="Session has no organization (onboarding incomplete)",
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent"),
                org_id=None,
            )
            return jsonify({
                "error": "Onboarding required",
                "needs_onboarding": True,
            }), 401

        g.role = permission_service.get_user_role(context.user.id, context.org_id)
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission.

    MULTI-TENANT: Denials are logged to security_events with org_id.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_permission(
                    user_id=g.current_user.id,
                    permission_code=permission_code,
                    resource=request.path,
                    ip_address=request.remote_addr,
                    user_agent=request.headers.get("User-Agent"),
                    org_id=g.org_id,
                )
            except PermissionDeniedError as e:
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_code,
                    "message": str(e)
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
