# Overview: Service-layer operations for the dashboard summary.

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..models import Appointment, Organization
from .appointment_service import Viewer
from .tenant_service import scoped_query
from barberdesk.time_utils import add_months, day_bounds, local_now, month_start

ACTIVE_CLIENT_WINDOW_DAYS = 90
UPCOMING_LIMIT = 5


def _visible(viewer: Viewer):
    query = scoped_query(Appointment, viewer.org_id)
    if not viewer.see_all:
        query = query.filter(Appointment.barber_id == viewer.profile_id)
    return query


def dashboard_summary(viewer: Viewer, org: Organization, now: datetime | None = None) -> dict:
    """
    Month revenue, today's load, active clients and the next appointments.

    Barbers get figures for their own appointments only.
    """
    now = now or local_now(org.timezone)
    today_start, today_end = day_bounds(now.date())
    first = datetime.combine(month_start(now.date()), datetime.min.time())
    next_first = datetime.combine(add_months(now.date(), 1), datetime.min.time())

    month_revenue = (
        _visible(viewer)
        .with_entities(func.coalesce(func.sum(Appointment.price_cents), 0))
        .filter(
            Appointment.status == "completed",
            Appointment.start_time >= first,
            Appointment.start_time < next_first,
        )
        .scalar()
    )

    todays = (
        _visible(viewer)
        .filter(Appointment.start_time >= today_start, Appointment.start_time < today_end)
        .all()
    )

    active_clients = (
        _visible(viewer)
        .with_entities(func.count(func.distinct(Appointment.client_id)))
        .filter(Appointment.start_time >= now - timedelta(days=ACTIVE_CLIENT_WINDOW_DAYS))
        .scalar()
    )

    upcoming = (
        _visible(viewer)
        .options(
            joinedload(Appointment.client),
            joinedload(Appointment.service),
            joinedload(Appointment.barber),
        )
        .filter(
            Appointment.start_time >= now,
            Appointment.status.in_(("scheduled", "confirmed")),
        )
        .order_by(Appointment.start_time.asc())
        .limit(UPCOMING_LIMIT)
        .all()
    )

    return {
        "month_revenue_cents": int(month_revenue or 0),
        "today_appointments": len(todays),
        "today_in_progress": sum(1 for a in todays if a.status == "in_progress"),
        "active_clients": int(active_clients or 0),
        "upcoming": [a.to_dict() for a in upcoming],
    }
