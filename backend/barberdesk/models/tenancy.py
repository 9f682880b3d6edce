from __future__ import annotations

from ..extensions import db
from barberdesk.time_utils import to_utc_z

class Organization(db.Model):
    """
    Multi-tenant root: every barbershop is an Organization.

    WHY: Enables shared-database multi-tenancy with strict isolation.
    Profiles, clients, catalog, appointments, stock and finance rows all
    carry org_id. No data may cross organization boundaries.

    DESIGN:
    - slug is globally unique and URL-safe (lowercase letters, digits, "-")
    - timezone is the wall-clock zone appointment times are recorded in
    """
    __tablename__ = "organizations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(64), nullable=False, unique=True, index=True)

    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(512), nullable=True)
    logo_url = db.Column(db.String(1024), nullable=True)

    timezone = db.Column(db.String(64), nullable=False, default="UTC")

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "logo_url": self.logo_url,
            "timezone": self.timezone,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
