from __future__ import annotations

from ..extensions import db
from barberdesk.time_utils import to_utc_z


class Service(db.Model):
    """
    Sellable offering (haircut, beard trim, combo...).

    price_cents is copied onto each Appointment at booking time, so editing
    a service never changes the price of existing appointments.
    """
    __tablename__ = "services"
    __table_args__ = (
        db.Index("ix_services_org_name", "org_id", "name"),
        db.Index("ix_services_org_category", "org_id", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    duration_minutes = db.Column(db.Integer, nullable=False, default=30)
    commission_rate = db.Column(db.Numeric(5, 2), nullable=False, default=0)

    category = db.Column(db.String(32), nullable=False, default="other")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "duration_minutes": self.duration_minutes,
            "commission_rate": float(self.commission_rate or 0),
            "category": self.category,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
