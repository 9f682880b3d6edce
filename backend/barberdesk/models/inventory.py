from __future__ import annotations

from ..extensions import db
from barberdesk.time_utils import to_utc_z


class Product(db.Model):
    """
    Stocked retail item (pomade, shampoo...).

    INVARIANT: stock_quantity == SUM(StockMovement.quantity) for the product.
    stock_quantity is a denormalized counter and is only ever written by
    stock_service, in the same transaction as the ledger row it reflects.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_org_name", "org_id", "name"),
        db.Index("ix_products_org_active", "org_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    sale_price_cents = db.Column(db.Integer, nullable=False, default=0)
    cost_price_cents = db.Column(db.Integer, nullable=True)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock_alert = db.Column(db.Integer, nullable=False, default=5)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def stock_status(self) -> str:
        if self.stock_quantity <= 0:
            return "out"
        threshold = self.min_stock_alert if self.min_stock_alert is not None else 5
        if self.stock_quantity < threshold:
            return "low"
        return "normal"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "description": self.description,
            "sale_price_cents": self.sale_price_cents,
            "cost_price_cents": self.cost_price_cents,
            "stock_quantity": self.stock_quantity,
            "min_stock_alert": self.min_stock_alert,
            "stock_status": self.stock_status,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockMovement(db.Model):
    """
    Immutable stock ledger entry.

    quantity is the signed delta applied to Product.stock_quantity:
    "in" is positive, "out"/"sale" negative, "adjustment" is whatever delta
    reaches the counted target.

    IMMUTABLE: Never update or delete.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_org_created", "org_id", "created_at"),
        db.Index("ix_stock_movements_product", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    movement_type = db.Column(db.String(16), nullable=False)
    reason = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_by_profile_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("stock_movements", lazy=True))
    created_by = db.relationship("Profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "movement_type": self.movement_type,
            "reason": self.reason,
            "notes": self.notes,
            "created_by_profile_id": self.created_by_profile_id,
            "created_by_name": self.created_by.full_name if self.created_by else None,
            "created_at": to_utc_z(self.created_at),
        }
