# Overview: Service-layer operations for the stock ledger; encapsulates business logic and database work.

"""
Stock Ledger Invariants (authoritative)

Ledger model:
- Every stock change is an immutable StockMovement row with a signed
  quantity delta.
- Product.stock_quantity is a denormalized counter that must equal
  SUM(StockMovement.quantity) for the product.

Movement semantics (typed quantity q, current counter s):
- in:         delta = +q, new stock = s + q          (q > 0)
- out:        rejected if q > s, else delta = -q     (q > 0)
- adjustment: delta = q - s, new stock = q           (q >= 0, q is the counted target)

Atomicity:
- The ledger row and the counter update are written in ONE database
  transaction with the product row locked. Either both land or neither.
- Stale counters (e.g. rows edited by hand) can be repaired with
  reconcile_product_stock, which trusts the ledger.
"""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Product, StockMovement
from ..validation import ValidationError
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import require_in_org, scoped_query


MOVEMENT_TYPES = ("in", "out", "adjustment")

# "sale" rows are reserved for point-of-sale deductions; they are listed in
# history but cannot be recorded through the manual movement form.
LEDGER_MOVEMENT_TYPES = MOVEMENT_TYPES + ("sale",)

MOVEMENT_REASONS = {
    "in": ("purchase", "return", "transfer", "other"),
    "out": ("sale", "loss", "donation", "transfer", "other"),
    "adjustment": ("inventory", "correction", "other"),
}

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 200


class InsufficientStockError(ValidationError):
    """Outgoing quantity exceeds the stock on hand."""


def _parse_quantity(raw) -> int:
    if isinstance(raw, bool):
        raise ValidationError("Invalid quantity")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdecimal():
        try:
            return int(raw.strip())
        except ValueError:
            raise ValidationError("Invalid quantity")
    raise ValidationError("Invalid quantity")


def validate_movement(movement_type: str, quantity, reason: str | None) -> tuple[int, str]:
    """
    Check type, quantity and reason before touching the database.

    Returns (quantity, reason); reason defaults to "other".
    """
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"movement_type must be one of: {', '.join(MOVEMENT_TYPES)}")

    qty = _parse_quantity(quantity)
    if movement_type == "adjustment":
        if qty < 0:
            raise ValidationError("Invalid quantity")
    elif qty <= 0:
        raise ValidationError("Invalid quantity")

    reason = (reason or "other").strip()
    if reason not in MOVEMENT_REASONS[movement_type]:
        raise ValidationError(
            f"reason for {movement_type} must be one of: {', '.join(MOVEMENT_REASONS[movement_type])}"
        )
    return qty, reason


def compute_movement(movement_type: str, quantity: int, current_stock: int) -> tuple[int, int]:
    """
    Pure ledger arithmetic.

    Returns (signed_delta, new_stock). Raises InsufficientStockError for an
    "out" larger than current_stock.
    """
    if movement_type == "in":
        return quantity, current_stock + quantity
    if movement_type == "out":
        if quantity > current_stock:
            raise InsufficientStockError("Quantity exceeds available stock")
        return -quantity, current_stock - quantity
    if movement_type == "adjustment":
        return quantity - current_stock, quantity
    raise ValidationError(f"Unknown movement_type: {movement_type}")


def apply_movement(
    product: Product,
    *,
    movement_type: str,
    quantity: int,
    reason: str,
    notes: str | None,
    profile_id: int | None,
) -> StockMovement:
    """
    Append the ledger row, then move the counter. Does not commit.

    Caller must hold the product row (locked where the DB supports it).
    """
    delta, new_stock = compute_movement(movement_type, quantity, product.stock_quantity or 0)

    movement = StockMovement(
        org_id=product.org_id,
        product_id=product.id,
        quantity=delta,
        movement_type=movement_type,
        reason=reason,
        notes=notes,
        created_by_profile_id=profile_id,
    )
    db.session.add(movement)
    db.session.flush()

    product.stock_quantity = new_stock
    return movement


def record_movement(
    *,
    org_id: int,
    product_id: int,
    movement_type: str,
    quantity,
    reason: str | None = None,
    notes: str | None = None,
    profile_id: int | None = None,
) -> tuple[StockMovement, Product]:
    """
    Record a manual stock movement atomically.

    Raises:
        ValidationError / InsufficientStockError: before any write happens
        TenantAccessError: product missing or in another organization
    """
    qty, reason = validate_movement(movement_type, quantity, reason)
    notes = (notes or "").strip() or None

    def _op():
        product = require_in_org(
            Product,
            product_id,
            org_id,
            label="Product",
            query=lock_for_update(db.session.query(Product)),
        )
        if not product.is_active:
            raise ValidationError("Product is inactive")
        try:
            movement = apply_movement(
                product,
                movement_type=movement_type,
                quantity=qty,
                reason=reason,
                notes=notes,
                profile_id=profile_id,
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return movement, product

    return run_with_retry(_op)


def list_movements(org_id: int, product_id: int | None = None, limit: int | None = None) -> list[StockMovement]:
    """Most recent movements first (default 20), optionally for one product."""
    limit = limit or DEFAULT_HISTORY_LIMIT
    limit = max(1, min(limit, MAX_HISTORY_LIMIT))

    query = scoped_query(StockMovement, org_id).options(
        joinedload(StockMovement.product),
        joinedload(StockMovement.created_by),
    )
    if product_id is not None:
        require_in_org(Product, product_id, org_id, label="Product")
        query = query.filter(StockMovement.product_id == product_id)
    return (
        query.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(limit)
        .all()
    )


def ledger_quantity(product_id: int) -> int:
    """SUM of ledger deltas for a product."""
    total = db.session.query(
        func.coalesce(func.sum(StockMovement.quantity), 0)
    ).filter(StockMovement.product_id == product_id).scalar()
    return int(total or 0)


def reconcile_product_stock(product: Product, *, fix: bool = False) -> dict:
    """
    Compare the denormalized counter with the ledger sum.

    With fix=True, overwrite the counter with the ledger value. Does not
    commit; the caller decides.
    """
    expected = ledger_quantity(product.id)
    drift = (product.stock_quantity or 0) - expected
    result = {
        "product_id": product.id,
        "org_id": product.org_id,
        "name": product.name,
        "stock_quantity": product.stock_quantity,
        "ledger_quantity": expected,
        "drift": drift,
        "fixed": False,
    }
    if drift and fix:
        product.stock_quantity = expected
        result["fixed"] = True
    return result


def reconcile_stock(org_id: int | None = None, *, fix: bool = False) -> list[dict]:
    """Reconcile every product (optionally one organization). Returns drifted rows only."""
    query = db.session.query(Product)
    if org_id is not None:
        query = query.filter(Product.org_id == org_id)

    drifted = []
    for product in query.order_by(Product.id.asc()).all():
        result = reconcile_product_stock(product, fix=fix)
        if result["drift"]:
            drifted.append(result)
    if fix and drifted:
        db.session.commit()
    return drifted
