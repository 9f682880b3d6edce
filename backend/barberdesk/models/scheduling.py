from __future__ import annotations

from ..extensions import db
from barberdesk.time_utils import to_local_iso, to_utc_z


class Appointment(db.Model):
    """
    A booking of one service for one client with one barber.

    TIME SEMANTICS: start_time/end_time are naive wall-clock datetimes in the
    organization's timezone (what the shop calendar shows).

    SNAPSHOTS: end_time is start_time + service duration and price_cents is
    the service price, both taken at creation. Later service edits do not
    touch existing appointments.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index("ix_appointments_org_start", "org_id", "start_time"),
        db.Index("ix_appointments_barber_start", "barber_id", "start_time"),
        db.Index("ix_appointments_org_status", "org_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False, index=True)
    barber_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)

    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)

    price_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="scheduled")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("appointments", lazy=True))
    service = db.relationship("Service", backref=db.backref("appointments", lazy=True))
    barber = db.relationship("Profile", backref=db.backref("appointments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "client_id": self.client_id,
            "client_name": self.client.name if self.client else None,
            "service_id": self.service_id,
            "service_name": self.service.name if self.service else None,
            "service_duration_minutes": self.service.duration_minutes if self.service else None,
            "barber_id": self.barber_id,
            "barber_name": self.barber.full_name if self.barber else None,
            "start_time": to_local_iso(self.start_time),
            "end_time": to_local_iso(self.end_time),
            "price_cents": self.price_cents,
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
