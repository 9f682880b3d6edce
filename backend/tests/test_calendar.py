# Overview: Pytest coverage for the calendar grid adapter and agenda routes.

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from barberdesk.services import calendar_service
from barberdesk.services.calendar_service import (
    build_calendar, position_in_day, slot_count, slot_labels, visible_range, week_start, today_summary,
)
from barberdesk.validation import ValidationError
from conftest import make_appointment


def _row(start, end, status="scheduled", price_cents=5000):
    """Lightweight stand-in for an Appointment row."""
    row = SimpleNamespace(
        id=1, start_time=start, end_time=end, status=status, price_cents=price_cents,
        barber_id=7, notes=None,
    )
    row.to_dict = lambda: {
        "client_name": "Joao",
        "service_name": "Corte",
        "barber_name": "Bruno",
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
    }
    return row


class TestGrid:
    def test_slots(self):
        assert slot_count() == 26
        labels = slot_labels()
        assert labels[0] == "08:00"
        assert labels[1] == "08:30"
        assert labels[-1] == "20:30"

    def test_week_starts_on_sunday(self):
        # 2026-10-21 is a Wednesday
        assert week_start(date(2026, 10, 21)) == date(2026, 10, 18)
        assert week_start(date(2026, 10, 18)) == date(2026, 10, 18)

    def test_visible_ranges(self):
        anchor = date(2026, 10, 21)
        assert visible_range("day", anchor) == (date(2026, 10, 21), date(2026, 10, 22))
        assert visible_range("week", anchor) == (date(2026, 10, 18), date(2026, 10, 25))
        first, last = visible_range("month", anchor)
        assert first == date(2026, 9, 27)
        assert last == date(2026, 11, 1)
        assert (last - first).days % 7 == 0

    def test_unknown_view(self):
        with pytest.raises(ValidationError):
            visible_range("year", date(2026, 10, 21))


class TestPositions:
    def test_inside_hours(self):
        pos = position_in_day(datetime(2026, 10, 21, 9, 0), datetime(2026, 10, 21, 9, 45))
        assert pos == {"slot_start": 2, "slot_span": 2, "clipped": False}

    def test_clipped_at_open(self):
        pos = position_in_day(datetime(2026, 10, 21, 7, 30), datetime(2026, 10, 21, 8, 30))
        assert pos == {"slot_start": 0, "slot_span": 1, "clipped": True}

    def test_outside_hours(self):
        assert position_in_day(datetime(2026, 10, 21, 21, 0), datetime(2026, 10, 21, 22, 0)) is None

    def test_week_event(self):
        rows = [_row(datetime(2026, 10, 21, 10, 0), datetime(2026, 10, 21, 10, 30), status="confirmed")]
        grid = build_calendar(rows, "week", date(2026, 10, 21))
        event = grid["events"][0]
        assert event["title"] == "Joao - Corte"
        assert event["color"] == calendar_service.STATUS_COLORS["confirmed"]
        assert event["position"] == {"column": 3, "slot_start": 4, "slot_span": 1, "clipped": False}
        assert len(grid["days"]) == 7
        assert len(grid["slots"]) == 26

    def test_month_event(self):
        rows = [_row(datetime(2026, 10, 21, 10, 0), datetime(2026, 10, 21, 10, 30))]
        grid = build_calendar(rows, "month", date(2026, 10, 1))
        assert grid["events"][0]["position"] == {"row": 3, "column": 3}
        assert grid["slots"] == []

    def test_rows_outside_range_are_skipped(self):
        rows = [_row(datetime(2026, 11, 30, 10, 0), datetime(2026, 11, 30, 10, 30))]
        assert build_calendar(rows, "week", date(2026, 10, 21))["events"] == []


class TestTodaySummary:
    def test_counts_and_revenue(self):
        day = date(2026, 10, 21)
        rows = [
            _row(datetime(2026, 10, 21, 9), datetime(2026, 10, 21, 10), status="completed", price_cents=5000),
            _row(datetime(2026, 10, 21, 11), datetime(2026, 10, 21, 12), status="completed", price_cents=3000),
            _row(datetime(2026, 10, 21, 13), datetime(2026, 10, 21, 14), status="confirmed"),
            _row(datetime(2026, 10, 22, 9), datetime(2026, 10, 22, 10), status="completed"),
        ]
        summary = today_summary(rows, day)
        assert summary["total"] == 3
        assert summary["confirmed"] == 1
        assert summary["completed"] == 2
        assert summary["revenue_cents"] == 8000


class TestAgendaApi:
    def test_events_endpoint(self, client, db_session, admin_headers, client_a, service_a, barber_a):
        make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                         start=datetime(2026, 10, 21, 10, 0))
        resp = client.get("/api/agenda/events?view=week&date=2026-10-21", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["range_start"] == "2026-10-18"
        assert resp.json["events"][0]["title"] == "Joao Silva - Corte"

    def test_bad_view(self, client, admin_headers):
        assert client.get("/api/agenda/events?view=year", headers=admin_headers).status_code == 400

    def test_bad_date(self, client, admin_headers):
        assert client.get("/api/agenda/events?date=21/10/2026", headers=admin_headers).status_code == 400

    def test_statuses(self, client, barber_headers):
        resp = client.get("/api/agenda/statuses", headers=barber_headers)
        assert [s["value"] for s in resp.json["items"]][0] == "scheduled"

    def test_summary_endpoint(self, client, admin_headers):
        resp = client.get("/api/agenda/summary", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["total"] == 0
