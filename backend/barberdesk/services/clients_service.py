# backend/barberdesk/services/clients_service.py
"""
Clients Service with Multi-Tenant Support

MULTI-TENANT: Every query is filtered by org_id; ids coming from the
client are resolved with require_in_org so a foreign row reads as
"not found".
"""
from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Appointment, Client
from ..validation import ConflictError, ModelValidationPolicy
from .tenant_service import require_in_org, scoped_query

CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "email", "notes"},
    required_on_create={"name"},
    blank_to_null={"phone", "email", "notes"},
)


def list_clients(org_id: int, search: str | None = None) -> list[Client]:
    """Clients ordered by name, optionally filtered by a name substring."""
    query = scoped_query(Client, org_id)
    if search and search.strip():
        query = query.filter(Client.name.ilike(f"%{search.strip()}%"))
    return query.order_by(Client.name.asc(), Client.id.asc()).all()


def get_client(org_id: int, client_id: int) -> Client:
    return require_in_org(Client, client_id, org_id, label="Client")


def create_client(org_id: int, patch: dict, created_by_profile_id: int | None) -> Client:
    client = Client(org_id=org_id, created_by_profile_id=created_by_profile_id, **patch)
    db.session.add(client)
    db.session.commit()
    return client


def update_client(org_id: int, client_id: int, patch: dict) -> Client:
    client = get_client(org_id, client_id)
    for key, value in patch.items():
        setattr(client, key, value)
    db.session.commit()
    return client


def delete_client(org_id: int, client_id: int) -> None:
    """
    Hard delete a client.

    Raises ConflictError if appointments still reference the client,
    since appointment history (and revenue) would be lost.
    """
    client = get_client(org_id, client_id)
    in_use = db.session.query(Appointment.id).filter_by(org_id=org_id, client_id=client.id).first()
    if in_use:
        raise ConflictError("Client has appointments and cannot be deleted")
    db.session.delete(client)
    db.session.commit()


def client_history(org_id: int, client_id: int) -> list[Appointment]:
    """A client's appointments, newest first, with service and barber loaded."""
    client = get_client(org_id, client_id)
    return (
        scoped_query(Appointment, org_id)
        .options(joinedload(Appointment.service), joinedload(Appointment.barber))
        .filter(Appointment.client_id == client.id)
        .order_by(Appointment.start_time.desc(), Appointment.id.desc())
        .all()
    )
