# Overview: Service-layer operations for appointments; encapsulates business logic and database work.

"""
Appointment Scheduling Service

VISIBILITY:
- Admins (VIEW_ALL_APPOINTMENTS) read and change every appointment of the
  organization.
- Barbers read and change only appointments where barber_id is their own
  profile. The restriction is part of the query, never a post-filter.

SNAPSHOTS (creation only):
- end_time = start_time + service.duration_minutes
- price_cents = service.price_cents
- status = "scheduled", whatever the payload says

RESCHEDULE: start/end are overwritten as given. Overlapping appointments
for the same barber are accepted; double-booking is left to the staff.

STATUS: any of the six statuses may follow any other unless the
ENFORCE_STATUS_TRANSITIONS setting is on, in which case STATUS_TRANSITIONS
is the allowed graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app, g
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Appointment, Client, Profile, Service
from ..validation import ConflictError, ValidationError
from .permission_service import PermissionDeniedError, user_has_permission
from .tenant_service import require_in_org, scoped_query
from barberdesk.time_utils import parse_local_datetime


APPOINTMENT_STATUSES = ("scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show")
TERMINAL_STATUSES = ("completed", "cancelled", "no_show")

STATUS_TRANSITIONS = {
    "scheduled": {"confirmed", "cancelled"},
    "confirmed": {"in_progress", "cancelled", "no_show"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
    "no_show": set(),
}


class InvalidStatusTransitionError(ConflictError):
    """Status change not allowed by STATUS_TRANSITIONS."""


@dataclass(frozen=True)
class Viewer:
    """Who is asking: decides which appointments are visible and mutable."""
    org_id: int
    profile_id: int
    see_all: bool


def current_viewer() -> Viewer:
    """Viewer for the request (call after @require_auth)."""
    return Viewer(
        org_id=g.org_id,
        profile_id=g.profile.id,
        see_all=user_has_permission(g.current_user.id, "VIEW_ALL_APPOINTMENTS", g.org_id),
    )


def parse_when(value, tz_name: str | None, field: str) -> datetime:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    try:
        return parse_local_datetime(value, tz_name)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO-8601 datetime")


def _base_query(viewer: Viewer):
    query = scoped_query(Appointment, viewer.org_id).options(
        joinedload(Appointment.client),
        joinedload(Appointment.service),
        joinedload(Appointment.barber),
    )
    if not viewer.see_all:
        query = query.filter(Appointment.barber_id == viewer.profile_id)
    return query


def list_appointments(
    viewer: Viewer,
    *,
    barber_id: int | None = None,
    status: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Appointment]:
    """
    Appointments visible to viewer, ordered by start time.

    barber_id / status of None or "all" mean no filter. start/end select
    appointments starting in [start, end).
    """
    query = _base_query(viewer)

    if barber_id not in (None, "", "all"):
        try:
            barber_id = int(barber_id)
        except (TypeError, ValueError):
            raise ValidationError("barber_id must be an integer or 'all'")
        query = query.filter(Appointment.barber_id == barber_id)
    if status not in (None, "", "all"):
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
        query = query.filter(Appointment.status == status)
    if start is not None:
        query = query.filter(Appointment.start_time >= start)
    if end is not None:
        query = query.filter(Appointment.start_time < end)

    return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()


def get_appointment(viewer: Viewer, appointment_id: int) -> Appointment:
    """
    Load an appointment the viewer may act on.

    Another barber's appointment reads as a permission problem, a foreign
    organization's as "not found".
    """
    appointment = require_in_org(Appointment, appointment_id, viewer.org_id, label="Appointment")
    if not viewer.see_all and appointment.barber_id != viewer.profile_id:
        raise PermissionDeniedError("Barbers can only manage their own appointments")
    return appointment


def _resolve_barber(viewer: Viewer, barber_id) -> Profile:
    if barber_id in (None, ""):
        barber_id = viewer.profile_id
    barber = require_in_org(Profile, barber_id, viewer.org_id, label="Barber")
    if not viewer.see_all and barber.id != viewer.profile_id:
        raise PermissionDeniedError("Barbers can only book their own appointments")
    if not barber.is_active:
        raise ValidationError("Barber is inactive")
    return barber


def create_appointment(viewer: Viewer, payload: dict, tz_name: str | None = None) -> Appointment:
    """
    Book an appointment.

    Required: client_id, service_id, start_time. barber_id defaults to the
    caller. Any status in the payload is ignored.
    """
    payload = payload or {}
    for field in ("client_id", "service_id"):
        if payload.get(field) in (None, ""):
            raise ValidationError(f"{field} is required")

    client = require_in_org(Client, payload["client_id"], viewer.org_id, label="Client")
    service = require_in_org(Service, payload["service_id"], viewer.org_id, label="Service")
    if not service.is_active:
        raise ValidationError("Service is inactive")
    barber = _resolve_barber(viewer, payload.get("barber_id"))

    start = parse_when(payload.get("start_time"), tz_name, "start_time")
    notes = (payload.get("notes") or "").strip() or None

    appointment = Appointment(
        org_id=viewer.org_id,
        client_id=client.id,
        service_id=service.id,
        barber_id=barber.id,
        start_time=start,
        end_time=start + timedelta(minutes=service.duration_minutes),
        price_cents=service.price_cents,
        status="scheduled",
        notes=notes,
    )
    db.session.add(appointment)
    db.session.commit()
    return appointment


def reschedule_appointment(
    viewer: Viewer,
    appointment_id: int,
    start_time,
    end_time,
    tz_name: str | None = None,
) -> Appointment:
    """Move an appointment (calendar drag). No overlap check."""
    appointment = get_appointment(viewer, appointment_id)
    start = parse_when(start_time, tz_name, "start_time")
    end = parse_when(end_time, tz_name, "end_time")
    if end <= start:
        raise ValidationError("end_time must be after start_time")

    appointment.start_time = start
    appointment.end_time = end
    db.session.commit()
    return appointment


def check_transition(current: str, target: str) -> None:
    if target not in APPOINTMENT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
    if not current_app.config.get("ENFORCE_STATUS_TRANSITIONS", False):
        return
    if current == target:
        return
    if target not in STATUS_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransitionError(f"Cannot change status from {current} to {target}")


def change_status(viewer: Viewer, appointment_id: int, status: str) -> Appointment:
    appointment = get_appointment(viewer, appointment_id)
    check_transition(appointment.status, status)
    appointment.status = status
    db.session.commit()
    return appointment


def update_notes(viewer: Viewer, appointment_id: int, notes: str | None) -> Appointment:
    appointment = get_appointment(viewer, appointment_id)
    appointment.notes = (notes or "").strip() or None
    db.session.commit()
    return appointment


def delete_appointment(viewer: Viewer, appointment_id: int) -> None:
    appointment = get_appointment(viewer, appointment_id)
    db.session.delete(appointment)
    db.session.commit()
