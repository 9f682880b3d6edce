# Overview: Flask API routes for appointments; parses input and returns JSON responses.

"""
Appointment routes.

VISIBILITY: admins see every appointment of the shop, barbers only their
own (see appointment_service.Viewer).

WEBHOOKS: after a successful create, reschedule or status change the
organization's integration receives an "appointment.<event>" POST. Delivery
is best effort and never changes the response.
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..services import appointment_service, integration_service
from ..services.appointment_service import current_viewer
from ..services.permission_service import PermissionDeniedError
from ..services.tenant_service import TenantAccessError, get_org
from ..validation import ValidationError, ConflictError
from ..decorators import require_auth, require_permission

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


def _notify(event: str, appointment) -> None:
    integration_service.deliver_event(g.org_id, f"appointment.{event}", {"appointment": appointment.to_dict()})


def _run(op, event: str | None = None, success_status: int = 200):
    """Shared error mapping for appointment mutations."""
    try:
        appointment = op()
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except TenantAccessError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": "Permission denied", "message": str(e)}, 403
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update appointment")
        return {"error": "Internal server error"}, 500

    if event:
        _notify(event, appointment)
    return appointment.to_dict(), success_status


@appointments_bp.get("")
@require_auth
@require_permission("VIEW_AGENDA")
def list_appointments_route():
    """
    Query params:
    - barber_id: int | "all"
    - status: one of the six statuses | "all"
    - start / end: ISO datetimes bounding start_time as [start, end)
    """
    org = get_org(g.org_id)
    try:
        start = request.args.get("start")
        end = request.args.get("end")
        appointments = appointment_service.list_appointments(
            current_viewer(),
            barber_id=request.args.get("barber_id"),
            status=request.args.get("status"),
            start=appointment_service.parse_when(start, org.timezone, "start") if start else None,
            end=appointment_service.parse_when(end, org.timezone, "end") if end else None,
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"items": [a.to_dict() for a in appointments], "count": len(appointments)}


@appointments_bp.post("")
@require_auth
@require_permission("MANAGE_APPOINTMENTS")
def create_appointment_route():
    """
    Body: {client_id, service_id, barber_id?, start_time, notes?}

    end_time and price come from the service; status is always "scheduled".
    """
    payload = request.get_json(silent=True) or {}
    tz_name = get_org(g.org_id).timezone
    return _run(
        lambda: appointment_service.create_appointment(current_viewer(), payload, tz_name),
        event="created",
        success_status=201,
    )


@appointments_bp.get("/<int:appointment_id>")
@require_auth
@require_permission("VIEW_AGENDA")
def get_appointment_route(appointment_id: int):
    return _run(lambda: appointment_service.get_appointment(current_viewer(), appointment_id))


@appointments_bp.patch("/<int:appointment_id>/reschedule")
@require_auth
@require_permission("MANAGE_APPOINTMENTS")
def reschedule_appointment_route(appointment_id: int):
    """Body: {start_time, end_time}. Overlaps are not rejected."""
    payload = request.get_json(silent=True) or {}
    tz_name = get_org(g.org_id).timezone
    return _run(
        lambda: appointment_service.reschedule_appointment(
            current_viewer(),
            appointment_id,
            payload.get("start_time"),
            payload.get("end_time"),
            tz_name,
        ),
        event="rescheduled",
    )


@appointments_bp.patch("/<int:appointment_id>/status")
@require_auth
@require_permission("MANAGE_APPOINTMENTS")
def change_status_route(appointment_id: int):
    """Body: {status}"""
    payload = request.get_json(silent=True) or {}
    return _run(
        lambda: appointment_service.change_status(current_viewer(), appointment_id, payload.get("status")),
        event="status_changed",
    )


@appointments_bp.patch("/<int:appointment_id>")
@require_auth
@require_permission("MANAGE_APPOINTMENTS")
def update_notes_route(appointment_id: int):
    """Body: {notes}"""
    payload = request.get_json(silent=True) or {}
    return _run(lambda: appointment_service.update_notes(current_viewer(), appointment_id, payload.get("notes")))


@appointments_bp.delete("/<int:appointment_id>")
@require_auth
@require_permission("MANAGE_APPOINTMENTS")
def delete_appointment_route(appointment_id: int):
    try:
        appointment_service.delete_appointment(current_viewer(), appointment_id)
    except TenantAccessError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": "Permission denied", "message": str(e)}, 403
    return {"ok": True}, 200
