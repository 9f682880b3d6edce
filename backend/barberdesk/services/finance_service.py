# Overview: Service-layer operations for finance; revenue/commission folds and expense CRUD.

"""
Finance: derived figures and the expense ledger.

The fold functions are pure: they take already-loaded rows (anything
with the right attributes) and return numbers, so recomputing from the
same snapshot always yields the same result. The *_for_org wrappers load
the rows and call the folds.

FIGURES:
- today's revenue: completed appointments starting in [midnight, next midnight)
- estimated profit: today's revenue minus ALL pending expenses (a daily
  figure against an all-time balance; kept as the shop owners know it)
- commission: completed revenue of the trailing 30 days x rate / 100,
  rounded half-up to the cent
- trend: per calendar month, completed revenue by appointment start and
  paid expenses by due date
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from ..extensions import db
from ..models import Appointment, Expense, Organization, Profile
from ..validation import ModelValidationPolicy, ValidationError
from .tenant_service import require_in_org, scoped_query
from barberdesk.time_utils import add_months, day_bounds, local_now, month_start


EXPENSE_CATEGORIES = ("water", "electricity", "internet", "rent", "supplies", "equipment", "other")
EXPENSE_STATUSES = ("pending", "paid")
COMMISSION_WINDOW_DAYS = 30
TREND_MONTHS = 6

EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "amount_cents", "due_date", "status", "category"},
    required_on_create={"name", "amount_cents", "due_date"},
    blank_to_null={"description"},
)


# -- Pure folds --

def today_revenue_cents(appointments, today: date) -> int:
    start, end = day_bounds(today)
    return sum(
        a.price_cents or 0
        for a in appointments
        if a.status == "completed" and start <= a.start_time < end
    )


def expense_totals(expenses) -> dict:
    pending = sum(e.amount_cents or 0 for e in expenses if e.status == "pending")
    paid = sum(e.amount_cents or 0 for e in expenses if e.status == "paid")
    return {"pending_cents": pending, "paid_cents": paid}


def estimated_profit_cents(today_revenue: int, pending_expenses: int) -> int:
    return today_revenue - pending_expenses


def commission_cents(revenue_cents: int, rate) -> int:
    """revenue x rate / 100, half-up to the cent (rate 20, 50000 -> 10000)."""
    amount = Decimal(revenue_cents) * Decimal(str(rate or 0)) / Decimal(100)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def barber_commissions(appointments, barbers, now: datetime, window_days: int = COMMISSION_WINDOW_DAYS) -> list[dict]:
    """
    Commission owed per barber over the trailing window.

    Every barber is listed, including those with no completed work.
    """
    cutoff = now - timedelta(days=window_days)
    revenue: dict[int, int] = defaultdict(int)
    counts: dict[int, int] = defaultdict(int)
    for a in appointments:
        if a.status == "completed" and a.start_time >= cutoff:
            revenue[a.barber_id] += a.price_cents or 0
            counts[a.barber_id] += 1

    rows = []
    for barber in barbers:
        barber_revenue = revenue.get(barber.id, 0)
        rows.append({
            "barber_id": barber.id,
            "barber_name": barber.full_name,
            "commission_rate": float(barber.commission_rate or 0),
            "appointments": counts.get(barber.id, 0),
            "revenue_cents": barber_revenue,
            "commission_cents": commission_cents(barber_revenue, barber.commission_rate),
        })
    return rows


def monthly_trend(appointments, expenses, today: date, months: int = TREND_MONTHS) -> list[dict]:
    """Oldest month first, current month last."""
    current = month_start(today)
    buckets = [add_months(current, -offset) for offset in range(months - 1, -1, -1)]
    revenue = {b: 0 for b in buckets}
    spent = {b: 0 for b in buckets}

    for a in appointments:
        key = month_start(a.start_time.date())
        if a.status == "completed" and key in revenue:
            revenue[key] += a.price_cents or 0

    for e in expenses:
        key = month_start(e.due_date)
        if e.status == "paid" and key in spent:
            spent[key] += e.amount_cents or 0

    return [
        {
            "month": b.strftime("%Y-%m"),
            "revenue_cents": revenue[b],
            "expenses_cents": spent[b],
            "net_cents": revenue[b] - spent[b],
        }
        for b in buckets
    ]


# -- Organization wrappers --

def overview_for_org(org: Organization, now: datetime | None = None) -> dict:
    now = now or local_now(org.timezone)
    start, end = day_bounds(now.date())
    todays = (
        scoped_query(Appointment, org.id)
        .filter(Appointment.start_time >= start, Appointment.start_time < end)
        .all()
    )
    expenses = scoped_query(Expense, org.id).all()

    revenue = today_revenue_cents(todays, now.date())
    totals = expense_totals(expenses)
    return {
        "date": now.date().isoformat(),
        "today_revenue_cents": revenue,
        "pending_expenses_cents": totals["pending_cents"],
        "paid_expenses_cents": totals["paid_cents"],
        "estimated_profit_cents": estimated_profit_cents(revenue, totals["pending_cents"]),
    }


def commissions_for_org(org: Organization, now: datetime | None = None) -> list[dict]:
    now = now or local_now(org.timezone)
    cutoff = now - timedelta(days=COMMISSION_WINDOW_DAYS)
    appointments = (
        scoped_query(Appointment, org.id)
        .filter(Appointment.status == "completed", Appointment.start_time >= cutoff)
        .all()
    )
    barbers = scoped_query(Profile, org.id).order_by(Profile.full_name.asc()).all()
    return barber_commissions(appointments, barbers, now)


def trend_for_org(org: Organization, today: date | None = None) -> list[dict]:
    today = today or local_now(org.timezone).date()
    first_month = add_months(month_start(today), -(TREND_MONTHS - 1))
    range_start = datetime.combine(first_month, datetime.min.time())
    appointments = (
        scoped_query(Appointment, org.id)
        .filter(Appointment.status == "completed", Appointment.start_time >= range_start)
        .all()
    )
    expenses = (
        scoped_query(Expense, org.id)
        .filter(Expense.status == "paid", Expense.due_date >= first_month)
        .all()
    )
    return monthly_trend(appointments, expenses, today)


# -- Expenses --

def validate_expense(patch: dict) -> None:
    if "category" in patch and patch["category"] not in EXPENSE_CATEGORIES:
        raise ValidationError(f"category must be one of: {', '.join(EXPENSE_CATEGORIES)}")
    if "status" in patch and patch["status"] not in EXPENSE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(EXPENSE_STATUSES)}")


def list_expenses(org_id: int, status: str | None = None, category: str | None = None) -> list[Expense]:
    """Expenses by due date, soonest first."""
    query = scoped_query(Expense, org_id)
    if status and status != "all":
        query = query.filter(Expense.status == status)
    if category and category != "all":
        query = query.filter(Expense.category == category)
    return query.order_by(Expense.due_date.asc(), Expense.id.asc()).all()


def create_expense(org_id: int, patch: dict) -> Expense:
    validate_expense(patch)
    patch.setdefault("status", "pending")
    patch.setdefault("category", "other")
    expense = Expense(org_id=org_id, **patch)
    db.session.add(expense)
    db.session.commit()
    return expense


def update_expense(org_id: int, expense_id: int, patch: dict) -> Expense:
    validate_expense(patch)
    expense = require_in_org(Expense, expense_id, org_id, label="Expense")
    for key, value in patch.items():
        setattr(expense, key, value)
    db.session.commit()
    return expense


def delete_expense(org_id: int, expense_id: int) -> None:
    expense = require_in_org(Expense, expense_id, org_id, label="Expense")
    db.session.delete(expense)
    db.session.commit()
