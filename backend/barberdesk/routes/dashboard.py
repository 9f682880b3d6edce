# Overview: Flask API route for the dashboard summary.

from flask import Blueprint, g

from ..services import dashboard_service
from ..services.appointment_service import current_viewer
from ..services.tenant_service import get_org
from ..decorators import require_auth, require_permission

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
@require_permission("VIEW_AGENDA")
def dashboard_route():
    return dashboard_service.dashboard_summary(current_viewer(), get_org(g.org_id))
