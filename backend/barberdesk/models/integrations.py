from __future__ import annotations

from ..extensions import db
from barberdesk.time_utils import to_utc_z


class Integration(db.Model):
    """
    Outbound webhook configuration. One row per organization.

    api_key is an opaque value (e.g. a WhatsApp gateway instance id) that is
    stored for the receiver's benefit and never interpreted here.
    """
    __tablename__ = "integrations"
    __table_args__ = (
        db.UniqueConstraint("org_id", name="uq_integrations_org"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    webhook_url = db.Column(db.String(2048), nullable=True)
    api_key = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=False)

    created_by_profile_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "webhook_url": self.webhook_url,
            "api_key": self.api_key,
            "is_active": self.is_active,
            "created_by_profile_id": self.created_by_profile_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
