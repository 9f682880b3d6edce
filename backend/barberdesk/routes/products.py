# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/barberdesk/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to the caller's organization.

SECURITY: All routes require authentication.
- Read operations require VIEW_INVENTORY permission
- Write operations require MANAGE_PRODUCTS permission
- Stock movements require RECORD_STOCK_MOVEMENT permission
"""
from flask import Blueprint, request, g, current_app

from ..extensions import db
from ..models import Product
from ..services import products_service, stock_service
from ..services.tenant_service import TenantAccessError
from ..validation import (
    validate_payload,
    enforce_rules_product,
    ValidationError,
)
from ..decorators import require_auth, require_permission

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_products():
    """
    Query params:
    - search: str (optional)
    - active: "1" to hide inactive products
    - stock_status: out|low|normal|all (optional)
    """
    products = products_service.list_products(
        g.org_id,
        search=request.args.get("search"),
        include_inactive=request.args.get("active") != "1",
        stock_status=request.args.get("stock_status"),
    )
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Create a new product.

    stock_quantity (optional) is the opening stock; it is recorded as an
    adjustment movement so the ledger explains it.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=products_service.PRODUCT_CREATE_POLICY, partial=False)
        enforce_rules_product(patch)  # Handles price validation including max check
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = products_service.create_product(g.org_id, patch, profile_id=g.profile.id)
    except ValidationError as e:
        db.session.rollback()
        return {"error": str(e)}, 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created.to_dict(), 201


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_product_route(product_id: int):
    try:
        return products_service.get_product(g.org_id, product_id).to_dict()
    except TenantAccessError:
        return {"error": "Product not found"}, 404


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    """Update product fields. stock_quantity is rejected: use stock movements."""
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Product, payload=payload, policy=products_service.PRODUCT_UPDATE_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = products_service.update_product(g.org_id, product_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Product not found"}, 404
    return updated.to_dict()


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: int):
    """Soft delete (is_active = false)."""
    try:
        products_service.deactivate_product(g.org_id, product_id)
    except TenantAccessError:
        return {"error": "Product not found"}, 404
    return {"ok": True}, 200


@products_bp.post("/<int:product_id>/stock-movements")
@require_auth
@require_permission("RECORD_STOCK_MOVEMENT")
def record_stock_movement_route(product_id: int):
    """
    Record a stock movement.

    Body: {movement_type: in|out|adjustment, quantity, reason, notes?}
    For adjustment, quantity is the counted stock level.
    """
    payload = request.get_json(silent=True) or {}
    try:
        movement, product = stock_service.record_movement(
            org_id=g.org_id,
            product_id=product_id,
            movement_type=payload.get("movement_type"),
            quantity=payload.get("quantity"),
            reason=payload.get("reason"),
            notes=payload.get("notes"),
            profile_id=g.profile.id,
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except TenantAccessError:
        return {"error": "Product not found"}, 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record stock movement")
        return {"error": "Internal server error"}, 500

    return {"movement": movement.to_dict(), "product": product.to_dict()}, 201
