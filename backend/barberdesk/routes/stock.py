# Overview: Flask API routes for stock movement history.

from flask import Blueprint, request, g

from ..services import stock_service
from ..services.tenant_service import TenantAccessError
from ..decorators import require_auth, require_permission

stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock-movements")


@stock_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_stock_movements_route():
    """
    Query params:
    - product_id: int (optional)
    - limit: int (optional, default 20)
    """
    try:
        movements = stock_service.list_movements(
            g.org_id,
            product_id=request.args.get("product_id", type=int),
            limit=request.args.get("limit", type=int),
        )
    except TenantAccessError:
        return {"error": "Product not found"}, 404
    return {
        "items": [m.to_dict() for m in movements],
        "count": len(movements),
        "reasons": {k: list(v) for k, v in stock_service.MOVEMENT_REASONS.items()},
    }
