# Overview: Flask API routes for the agenda calendar grid and today summary.

from datetime import date, datetime, time

from flask import Blueprint, request, g

from ..services import appointment_service, calendar_service
from ..services.appointment_service import current_viewer
from ..services.tenant_service import get_org
from ..validation import ValidationError
from ..decorators import require_auth, require_permission
from barberdesk.time_utils import day_bounds, local_now

agenda_bp = Blueprint("agenda", __name__, url_prefix="/api/agenda")


def _parse_date(value: str | None, default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")


@agenda_bp.get("/events")
@require_auth
@require_permission("VIEW_AGENDA")
def calendar_events_route():
    """
    Positioned calendar events.

    Query params:
    - view: day|week|month (default week)
    - date: YYYY-MM-DD anchor (default today in the shop's timezone)
    - barber_id / status: same filters as /api/appointments
    """
    org = get_org(g.org_id)
    view = request.args.get("view", calendar_service.DEFAULT_VIEW)
    try:
        anchor = _parse_date(request.args.get("date"), local_now(org.timezone).date())
        first, last = calendar_service.visible_range(view, anchor)
        appointments = appointment_service.list_appointments(
            current_viewer(),
            barber_id=request.args.get("barber_id"),
            status=request.args.get("status"),
            start=datetime.combine(first, time.min),
            end=datetime.combine(last, time.min),
        )
        return calendar_service.build_calendar(appointments, view, anchor)
    except ValidationError as e:
        return {"error": str(e)}, 400


@agenda_bp.get("/summary")
@require_auth
@require_permission("VIEW_AGENDA")
def today_summary_route():
    """Today's count, confirmed, completed and completed revenue."""
    org = get_org(g.org_id)
    today = local_now(org.timezone).date()
    start, end = day_bounds(today)
    appointments = appointment_service.list_appointments(current_viewer(), start=start, end=end)
    return calendar_service.today_summary(appointments, today)


@agenda_bp.get("/statuses")
@require_auth
def statuses_route():
    """Status vocabulary with display colors for legends and pickers."""
    return {
        "items": [
            {
                "value": status,
                "label": calendar_service.STATUS_LABELS[status],
                "color": calendar_service.STATUS_COLORS[status],
            }
            for status in appointment_service.APPOINTMENT_STATUSES
        ]
    }
