# Overview: Pytest coverage for finance figures and the expense ledger.

"""
Finance Tests

The folds are pure, so most of them run on SimpleNamespace rows; the
*_for_org wrappers and routes are exercised against the database.
"""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from barberdesk.models import Expense
from barberdesk.services import finance_service
from barberdesk.services.finance_service import (
    barber_commissions, commission_cents, estimated_profit_cents, expense_totals, monthly_trend, today_revenue_cents,
)
from conftest import make_appointment


def _appt(start, status="completed", price_cents=5000, barber_id=1):
    return SimpleNamespace(start_time=start, status=status, price_cents=price_cents, barber_id=barber_id)


def _expense(due, amount_cents, status="pending"):
    return SimpleNamespace(due_date=due, amount_cents=amount_cents, status=status)


class TestFolds:
    def test_today_revenue_counts_completed_today_only(self):
        today = date(2026, 10, 19)
        rows = [
            _appt(datetime(2026, 10, 19, 0, 0), price_cents=1000),
            _appt(datetime(2026, 10, 19, 23, 59), price_cents=2000),
            _appt(datetime(2026, 10, 20, 0, 0), price_cents=4000),
            _appt(datetime(2026, 10, 19, 12, 0), status="confirmed", price_cents=8000),
        ]
        assert today_revenue_cents(rows, today) == 3000

    def test_today_revenue_recomputes_identically(self):
        today = date(2026, 10, 19)
        rows = [
            _appt(datetime(2026, 10, 19, 9, 0), price_cents=4500),
            _appt(datetime(2026, 10, 19, 17, 30), price_cents=3000),
            _appt(datetime(2026, 10, 19, 11, 0), status="cancelled", price_cents=9000),
        ]
        before = [vars(r).copy() for r in rows]
        first = today_revenue_cents(rows, today)
        second = today_revenue_cents(rows, today)
        assert first == second == 7500
        assert [vars(r) for r in rows] == before

    def test_expense_totals(self):
        rows = [
            _expense(date(2026, 10, 1), 10000),
            _expense(date(2026, 9, 1), 2500),
            _expense(date(2026, 10, 5), 7000, status="paid"),
        ]
        assert expense_totals(rows) == {"pending_cents": 12500, "paid_cents": 7000}

    def test_estimated_profit_uses_all_pending(self):
        assert estimated_profit_cents(3000, 12500) == -9500

    @pytest.mark.parametrize("revenue,rate,expected", [
        (50000, 20, 10000),
        (12345, Decimal("33.33"), 4115),
        (1, 50, 1),
        (0, 40, 0),
        (10000, None, 0),
    ])
    def test_commission_rounding(self, revenue, rate, expected):
        assert commission_cents(revenue, rate) == expected

    def test_barber_commissions_window(self):
        now = datetime(2026, 10, 19, 12, 0)
        barbers = [
            SimpleNamespace(id=1, full_name="Bruno", commission_rate=Decimal("40")),
            SimpleNamespace(id=2, full_name="Carlos", commission_rate=Decimal("50")),
        ]
        rows = [
            _appt(datetime(2026, 10, 10), price_cents=10000, barber_id=1),
            _appt(datetime(2026, 9, 1), price_cents=99999, barber_id=1),
            _appt(datetime(2026, 10, 18), status="cancelled", price_cents=5000, barber_id=1),
        ]
        result = {r["barber_id"]: r for r in barber_commissions(rows, barbers, now)}
        assert result[1]["revenue_cents"] == 10000
        assert result[1]["commission_cents"] == 4000
        assert result[1]["appointments"] == 1
        assert result[2]["commission_cents"] == 0

    def test_monthly_trend(self):
        today = date(2026, 10, 19)
        appointments = [
            _appt(datetime(2026, 10, 2), price_cents=5000),
            _appt(datetime(2026, 8, 15), price_cents=3000),
            _appt(datetime(2026, 4, 30), price_cents=7777),
        ]
        expenses = [
            _expense(date(2026, 10, 10), 2000, status="paid"),
            _expense(date(2026, 10, 11), 9000, status="pending"),
        ]
        trend = monthly_trend(appointments, expenses, today)
        assert [m["month"] for m in trend] == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
        assert trend[-1] == {"month": "2026-10", "revenue_cents": 5000, "expenses_cents": 2000, "net_cents": 3000}
        assert trend[3]["revenue_cents"] == 3000

    def test_trend_crosses_year_boundary(self):
        trend = monthly_trend([], [], date(2026, 2, 10))
        assert trend[0]["month"] == "2025-09"


class TestOrgWrappers:
    def test_overview_for_org(self, db_session, org_a, client_a, service_a, barber_a):
        now = datetime(2026, 10, 19, 18, 0)
        make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                         start=datetime(2026, 10, 19, 10, 0), status="completed")
        make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                         start=datetime(2026, 10, 18, 10, 0), status="completed")
        db_session.add(Expense(org_id=org_a.id, name="Luz", amount_cents=2000, due_date=date(2026, 11, 5)))
        db_session.commit()

        overview = finance_service.overview_for_org(org_a, now)
        assert overview["today_revenue_cents"] == 5000
        assert overview["pending_expenses_cents"] == 2000
        assert overview["estimated_profit_cents"] == 3000

    def test_overview_recomputes_identically(self, db_session, org_a, client_a, service_a, barber_a):
        now = datetime(2026, 10, 19, 18, 0)
        appointment = make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                                       start=datetime(2026, 10, 19, 10, 0), status="completed")
        db_session.add(Expense(org_id=org_a.id, name="Agua", amount_cents=1500, due_date=date(2026, 10, 25)))
        db_session.commit()

        first = finance_service.overview_for_org(org_a, now)
        second = finance_service.overview_for_org(org_a, now)
        assert first == second
        db_session.refresh(appointment)
        assert appointment.status == "completed"
        assert appointment.price_cents == 5000

    def test_commissions_for_org(self, db_session, org_a, admin_a, client_a, service_a, barber_a):
        make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                         start=datetime(2026, 10, 15, 10, 0), status="completed")
        rows = finance_service.commissions_for_org(org_a, datetime(2026, 10, 19, 12, 0))
        by_name = {r["barber_name"]: r for r in rows}
        assert by_name["Bruno Barber"]["commission_cents"] == 2000
        assert by_name["Ana Owner"]["commission_cents"] == 0


class TestExpenseApi:
    def test_crud(self, client, admin_headers):
        resp = client.post("/api/finance/expenses", json={
            "name": "Aluguel",
            "amount_cents": 150000,
            "due_date": "2026-11-05",
            "category": "rent",
        }, headers=admin_headers)
        assert resp.status_code == 201
        expense_id = resp.json["id"]
        assert resp.json["status"] == "pending"

        resp = client.put(f"/api/finance/expenses/{expense_id}", json={"status": "paid"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["status"] == "paid"

        listed = client.get("/api/finance/expenses?status=paid", headers=admin_headers).json
        assert [e["id"] for e in listed["items"]] == [expense_id]

        assert client.delete(f"/api/finance/expenses/{expense_id}", headers=admin_headers).status_code == 200
        assert client.get("/api/finance/expenses", headers=admin_headers).json["count"] == 0

    def test_list_ordered_by_due_date(self, client, admin_headers):
        for name, due in (("B", "2026-12-01"), ("A", "2026-11-01")):
            client.post("/api/finance/expenses", json={"name": name, "amount_cents": 100, "due_date": due},
                        headers=admin_headers)
        names = [e["name"] for e in client.get("/api/finance/expenses", headers=admin_headers).json["items"]]
        assert names == ["A", "B"]

    @pytest.mark.parametrize("payload", [
        {"name": "X", "amount_cents": -5, "due_date": "2026-11-01"},
        {"name": "X", "amount_cents": 100, "due_date": "not-a-date"},
        {"name": "X", "amount_cents": 100, "due_date": "2026-11-01", "category": "food"},
        {"name": "X", "amount_cents": 100, "due_date": "2026-11-01", "status": "overdue"},
        {"name": "X", "amount_cents": 100},
    ])
    def test_invalid_expense(self, client, admin_headers, payload):
        assert client.post("/api/finance/expenses", json=payload, headers=admin_headers).status_code == 400

    def test_foreign_expense_is_404(self, client, db_session, admin_headers, org_b):
        expense = Expense(org_id=org_b.id, name="Agua", amount_cents=100, due_date=date(2026, 11, 1))
        db_session.add(expense)
        db_session.commit()
        assert client.delete(f"/api/finance/expenses/{expense.id}", headers=admin_headers).status_code == 404

    def test_figures_endpoints(self, client, admin_headers):
        assert client.get("/api/finance/overview", headers=admin_headers).status_code == 200
        commissions = client.get("/api/finance/commissions", headers=admin_headers).json
        assert commissions["window_days"] == 30
        trend = client.get("/api/finance/trend", headers=admin_headers).json
        assert len(trend["items"]) == 6
