# backend/barberdesk/services/products_service.py
"""
Products Service with Multi-Tenant Support

stock_quantity is not writable here: opening stock is recorded as an
"adjustment" ledger row at creation, and every later change goes through
stock_service so the counter never drifts from the ledger.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Product
from ..validation import ModelValidationPolicy
from .stock_service import apply_movement
from .tenant_service import require_in_org, scoped_query

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "sale_price_cents", "cost_price_cents", "stock_quantity", "min_stock_alert", "is_active"},
    required_on_create={"name", "sale_price_cents"},
    blank_to_null={"description"},
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "sale_price_cents", "cost_price_cents", "min_stock_alert", "is_active"},
    blank_to_null={"description"},
)


def list_products(
    org_id: int,
    search: str | None = None,
    include_inactive: bool = True,
    stock_status: str | None = None,
) -> list[Product]:
    query = scoped_query(Product, org_id)
    if search and search.strip():
        query = query.filter(Product.name.ilike(f"%{search.strip()}%"))
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    products = query.order_by(Product.name.asc(), Product.id.asc()).all()
    if stock_status and stock_status != "all":
        products = [p for p in products if p.stock_status == stock_status]
    return products


def get_product(org_id: int, product_id: int) -> Product:
    return require_in_org(Product, product_id, org_id, label="Product")


def create_product(org_id: int, patch: dict, profile_id: int | None = None) -> Product:
    """Create a product; a non-zero opening stock lands in the ledger in the same transaction."""
    opening_stock = patch.pop("stock_quantity", None) or 0
    patch.setdefault("min_stock_alert", 5)

    product = Product(org_id=org_id, stock_quantity=0, **patch)
    db.session.add(product)
    db.session.flush()

    if opening_stock:
        apply_movement(
            product,
            movement_type="adjustment",
            quantity=opening_stock,
            reason="inventory",
            notes="Opening stock",
            profile_id=profile_id,
        )

    db.session.commit()
    return product


def update_product(org_id: int, product_id: int, patch: dict) -> Product:
    product = get_product(org_id, product_id)
    for key, value in patch.items():
        setattr(product, key, value)
    db.session.commit()
    return product


def deactivate_product(org_id: int, product_id: int) -> Product:
    """Soft delete: the ledger keeps referencing the product."""
    product = get_product(org_id, product_id)
    product.is_active = False
    db.session.commit()
    return product
