# Overview: Flask API routes for finance figures and expenses.

"""
Finance routes.

SECURITY:
- Figures (overview, commissions, trend) and expense reads require VIEW_FINANCE
- Expense writes require MANAGE_EXPENSES
Both are admin-only permissions.
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..models import Expense
from ..services import finance_service
from ..services.tenant_service import TenantAccessError, get_org
from ..validation import validate_payload, enforce_rules_expense, ValidationError
from ..decorators import require_auth, require_permission

finance_bp = Blueprint("finance", __name__, url_prefix="/api/finance")


@finance_bp.get("/overview")
@require_auth
@require_permission("VIEW_FINANCE")
def overview_route():
    """Today's revenue, pending/paid expense totals, estimated profit."""
    return finance_service.overview_for_org(get_org(g.org_id))


@finance_bp.get("/commissions")
@require_auth
@require_permission("VIEW_FINANCE")
def commissions_route():
    rows = finance_service.commissions_for_org(get_org(g.org_id))
    return {
        "items": rows,
        "window_days": finance_service.COMMISSION_WINDOW_DAYS,
        "total_commission_cents": sum(r["commission_cents"] for r in rows),
    }


@finance_bp.get("/trend")
@require_auth
@require_permission("VIEW_FINANCE")
def trend_route():
    return {"items": finance_service.trend_for_org(get_org(g.org_id))}


@finance_bp.get("/expenses")
@require_auth
@require_permission("VIEW_FINANCE")
def list_expenses_route():
    """
    Query params:
    - status: pending|paid|all
    - category: one of EXPENSE_CATEGORIES | all
    """
    expenses = finance_service.list_expenses(
        g.org_id,
        status=request.args.get("status"),
        category=request.args.get("category"),
    )
    return {
        "items": [e.to_dict() for e in expenses],
        "count": len(expenses),
        "categories": list(finance_service.EXPENSE_CATEGORIES),
    }


@finance_bp.post("/expenses")
@require_auth
@require_permission("MANAGE_EXPENSES")
def create_expense_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Expense, payload=payload, policy=finance_service.EXPENSE_POLICY, partial=False)
        enforce_rules_expense(patch)
        expense = finance_service.create_expense(g.org_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create expense")
        return {"error": "Internal server error"}, 500
    return expense.to_dict(), 201


@finance_bp.put("/expenses/<int:expense_id>")
@require_auth
@require_permission("MANAGE_EXPENSES")
def update_expense_route(expense_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Expense, payload=payload, policy=finance_service.EXPENSE_POLICY, partial=True)
        enforce_rules_expense(patch)
        expense = finance_service.update_expense(g.org_id, expense_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Expense not found"}, 404
    return expense.to_dict()


@finance_bp.delete("/expenses/<int:expense_id>")
@require_auth
@require_permission("MANAGE_EXPENSES")
def delete_expense_route(expense_id: int):
    try:
        finance_service.delete_expense(g.org_id, expense_id)
    except TenantAccessError:
        return {"error": "Expense not found"}, 404
    return {"ok": True}, 200
