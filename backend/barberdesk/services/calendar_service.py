# Overview: Calendar grid adapter; maps appointments onto day/week/month grids.

"""
Calendar grid adapter (pure functions, no database access).

GRID:
- Views: day, week (default), month
- Weeks start on Sunday
- Visible hours 08:00-21:00 in 30-minute slots (26 rows)

Day/week events get a column (day index inside the range) plus a slot
range, clipped to the visible hours. Month events get a (week row,
weekday column) cell. Events entirely outside the visible hours keep
position None; they are still returned so list views can show them.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

from ..validation import ValidationError


VIEWS = ("day", "week", "month")
DEFAULT_VIEW = "week"

DAY_START = time(8, 0)
DAY_END = time(21, 0)
SLOT_MINUTES = 30

STATUS_COLORS = {
    "scheduled": "#3b82f6",
    "confirmed": "#10b981",
    "in_progress": "#eab308",
    "completed": "#22c55e",
    "cancelled": "#ef4444",
    "no_show": "#f97316",
}
DEFAULT_COLOR = "#6b7280"

STATUS_LABELS = {
    "scheduled": "Scheduled",
    "confirmed": "Confirmed",
    "in_progress": "In progress",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "no_show": "No show",
}


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def slot_count() -> int:
    return (_minutes(DAY_END) - _minutes(DAY_START)) // SLOT_MINUTES


def slot_labels() -> list[str]:
    """["08:00", "08:30", ..., "20:30"]"""
    start = _minutes(DAY_START)
    return [
        f"{(start + i * SLOT_MINUTES) // 60:02d}:{(start + i * SLOT_MINUTES) % 60:02d}"
        for i in range(slot_count())
    ]


def week_start(day: date) -> date:
    """Sunday on or before day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def visible_range(view: str, anchor: date) -> tuple[date, date]:
    """
    Dates covered by a view around anchor, as [first, last + 1 day).

    month covers whole weeks, so it may start in the previous month and
    end in the next one.
    """
    if view == "day":
        return anchor, anchor + timedelta(days=1)
    if view == "week":
        first = week_start(anchor)
        return first, first + timedelta(days=7)
    if view == "month":
        first_of_month = anchor.replace(day=1)
        next_month = (first_of_month + timedelta(days=32)).replace(day=1)
        first = week_start(first_of_month)
        last = week_start(next_month - timedelta(days=1)) + timedelta(days=7)
        return first, last
    raise ValidationError(f"view must be one of: {', '.join(VIEWS)}")


def event_title(client_name: str | None, service_name: str | None) -> str:
    return f"{client_name or '?'} - {service_name or '?'}"


def to_event(appointment) -> dict:
    """Appointment row -> calendar event payload."""
    data = appointment.to_dict()
    return {
        "id": appointment.id,
        "title": event_title(data["client_name"], data["service_name"]),
        "start": data["start_time"],
        "end": data["end_time"],
        "client_name": data["client_name"],
        "service_name": data["service_name"],
        "barber_id": appointment.barber_id,
        "barber_name": data["barber_name"],
        "status": appointment.status,
        "status_label": STATUS_LABELS.get(appointment.status, appointment.status),
        "price_cents": appointment.price_cents,
        "notes": appointment.notes,
        "color": STATUS_COLORS.get(appointment.status, DEFAULT_COLOR),
    }


def position_in_day(start: datetime, end: datetime) -> dict | None:
    """Slot placement inside the visible hours, or None if fully outside."""
    day = start.date()
    window_start = datetime.combine(day, DAY_START)
    window_end = datetime.combine(day, DAY_END)

    clipped_start = max(start, window_start)
    clipped_end = min(end, window_end)
    if clipped_end <= clipped_start:
        return None

    offset_start = (clipped_start - window_start).total_seconds() / 60
    offset_end = (clipped_end - window_start).total_seconds() / 60
    first_slot = int(offset_start // SLOT_MINUTES)
    last_slot = int(math.ceil(offset_end / SLOT_MINUTES))
    return {
        "slot_start": first_slot,
        "slot_span": max(1, last_slot - first_slot),
        "clipped": clipped_start != start or clipped_end != end,
    }


def position_event(view: str, range_start: date, start: datetime, end: datetime) -> dict | None:
    day_index = (start.date() - range_start).days
    if view == "month":
        return {"row": day_index // 7, "column": day_index % 7}

    slots = position_in_day(start, end)
    if slots is None:
        return None
    return {"column": day_index, **slots}


def build_calendar(appointments, view: str = DEFAULT_VIEW, anchor: date | None = None) -> dict:
    """
    Full grid payload for a view.

    appointments should already be limited to the visible range; rows
    outside it are skipped.
    """
    if view not in VIEWS:
        raise ValidationError(f"view must be one of: {', '.join(VIEWS)}")
    anchor = anchor or date.today()
    first, last = visible_range(view, anchor)

    events = []
    for appointment in appointments:
        if not (first <= appointment.start_time.date() < last):
            continue
        event = to_event(appointment)
        event["position"] = position_event(view, first, appointment.start_time, appointment.end_time)
        events.append(event)

    return {
        "view": view,
        "anchor": anchor.isoformat(),
        "range_start": first.isoformat(),
        "range_end": last.isoformat(),
        "days": [(first + timedelta(days=i)).isoformat() for i in range((last - first).days)],
        "slot_minutes": SLOT_MINUTES,
        "slots": slot_labels() if view != "month" else [],
        "events": events,
    }


def today_summary(appointments, today: date) -> dict:
    """
    Header numbers of the agenda: today's count, confirmed, completed and
    completed revenue.
    """
    todays = [a for a in appointments if a.start_time.date() == today]
    completed = [a for a in todays if a.status == "completed"]
    return {
        "date": today.isoformat(),
        "total": len(todays),
        "confirmed": sum(1 for a in todays if a.status == "confirmed"),
        "completed": len(completed),
        "revenue_cents": sum(a.price_cents or 0 for a in completed),
    }
