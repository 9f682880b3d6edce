"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Barber role denied admin-only operations (403)
- Admin role can perform privileged operations
- Barbers only see and change their own appointments
"""

from datetime import datetime

import pytest
from barberdesk.models import SecurityEvent, UserRole
from barberdesk.permissions import DEFAULT_ROLE_PERMISSIONS, ROLE_ADMIN, ROLE_BARBER
from barberdesk.services.permission_service import get_user_permissions, user_has_permission
from barberdesk.services.auth_service import create_user
from conftest import PASSWORD, make_appointment


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/organization"),
            ("GET", "/api/clients"),
            ("POST", "/api/clients"),
            ("GET", "/api/services"),
            ("GET", "/api/products"),
            ("GET", "/api/stock-movements"),
            ("GET", "/api/appointments"),
            ("POST", "/api/appointments"),
            ("GET", "/api/agenda/events"),
            ("GET", "/api/dashboard"),
            ("GET", "/api/finance/overview"),
            ("GET", "/api/finance/expenses"),
            ("GET", "/api/team"),
            ("GET", "/api/integrations"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token_is_rejected(self, client, db_session):
        resp = client.get("/api/clients", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"


# =============================================================================
# BARBER DENIED ADMIN OPERATIONS - 403
# =============================================================================


class TestBarberDeniedAdminOperations:
    """Barbers keep the agenda and clients; everything else is admin-only."""

    @pytest.mark.parametrize(
        "method,path,body",
        [
            ("GET", "/api/finance/overview", None),
            ("GET", "/api/finance/commissions", None),
            ("GET", "/api/finance/trend", None),
            ("GET", "/api/finance/expenses", None),
            ("POST", "/api/finance/expenses", {"name": "Rent", "amount_cents": 100000, "due_date": "2026-10-30"}),
            ("POST", "/api/services", {"name": "Corte", "price_cents": 5000}),
            ("POST", "/api/products", {"name": "Gel", "sale_price_cents": 1000}),
            ("POST", "/api/team", {"email": "x@y.com", "password": "secret1", "full_name": "New Guy"}),
            ("PUT", "/api/organization", {"name": "Renamed"}),
            ("GET", "/api/integrations", None),
            ("PUT", "/api/integrations", {"webhook_url": "https://hooks.example.com/x"}),
        ],
    )
    def test_barber_forbidden(self, client, barber_headers, method, path, body):
        kwargs = {"headers": barber_headers}
        if body is not None:
            kwargs["json"] = body
        resp = getattr(client, method.lower())(path, **kwargs)
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"
        assert resp.json["error"] == "Permission denied"

    def test_barber_cannot_delete_client(self, client, barber_headers, client_a):
        resp = client.delete(f"/api/clients/{client_a.id}", headers=barber_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "DELETE_CLIENTS"

    def test_barber_cannot_record_stock_movement(self, client, barber_headers, product_a):
        resp = client.post(
            f"/api/products/{product_a.id}/stock-movements",
            json={"movement_type": "out", "quantity": 1, "reason": "sale"},
            headers=barber_headers,
        )
        assert resp.status_code == 403

    def test_denial_is_logged(self, client, db_session, barber_headers, barber_a):
        client.get("/api/finance/overview", headers=barber_headers)
        event = db_session.query(SecurityEvent).filter_by(event_type="PERMISSION_DENIED").first()
        assert event is not None
        assert event.user_id == barber_a.user_id
        assert event.org_id == barber_a.org_id

    def test_barber_reads_catalog_stock_and_team(self, client, barber_headers, service_a, product_a):
        assert client.get("/api/services", headers=barber_headers).status_code == 200
        assert client.get("/api/products", headers=barber_headers).status_code == 200
        assert client.get("/api/team/barbers", headers=barber_headers).status_code == 200

    def test_barber_manages_clients(self, client, barber_headers):
        resp = client.post("/api/clients", json={"name": "Pedro"}, headers=barber_headers)
        assert resp.status_code == 201


# =============================================================================
# ADMIN ACCESS
# =============================================================================


class TestAdminAccess:
    def test_admin_views_finance(self, client, admin_headers):
        assert client.get("/api/finance/overview", headers=admin_headers).status_code == 200

    def test_admin_updates_organization(self, client, admin_headers):
        resp = client.put("/api/organization", json={"name": "Alfa Prime", "phone": "1133334444"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["organization"]["name"] == "Alfa Prime"

    def test_admin_deletes_client(self, client, admin_headers, client_a):
        assert client.delete(f"/api/clients/{client_a.id}", headers=admin_headers).status_code == 200


# =============================================================================
# ROLE -> PERMISSION MAP
# =============================================================================


class TestRolePermissions:
    def test_admin_has_everything_barber_has(self):
        assert set(DEFAULT_ROLE_PERMISSIONS[ROLE_BARBER]) <= set(DEFAULT_ROLE_PERMISSIONS[ROLE_ADMIN])

    def test_barber_lacks_finance_and_view_all(self, db_session, barber_a):
        perms = get_user_permissions(barber_a.user_id, barber_a.org_id)
        assert "VIEW_FINANCE" not in perms
        assert "VIEW_ALL_APPOINTMENTS" not in perms
        assert "MANAGE_APPOINTMENTS" in perms

    def test_no_permissions_outside_own_org(self, db_session, admin_a, org_b):
        assert user_has_permission(admin_a.user_id, "VIEW_CLIENTS", org_b.id) is False

    def test_staff_without_role_row_gets_barber_set(self, db_session, barber_a):
        db_session.query(UserRole).filter_by(user_id=barber_a.user_id).delete()
        db_session.commit()
        assert get_user_permissions(barber_a.user_id, barber_a.org_id) == set(DEFAULT_ROLE_PERMISSIONS[ROLE_BARBER])

    def test_user_without_profile_gets_nothing(self, db_session, org_a):
        user = create_user("visitante@alfa.com", PASSWORD, "Visitante")
        db_session.commit()
        assert get_user_permissions(user.id, org_a.id) == set()
        assert get_user_permissions(user.id, None) == set()

    def test_admin_role_in_own_org(self, db_session, admin_a):
        assert user_has_permission(admin_a.user_id, "VIEW_ALL_APPOINTMENTS", admin_a.org_id) is True
        assert ROLE_ADMIN in DEFAULT_ROLE_PERMISSIONS


# =============================================================================
# APPOINTMENT VISIBILITY
# =============================================================================


class TestAppointmentVisibility:
    """Admins see every appointment; barbers only their own."""

    @pytest.fixture
    def booked(self, db_session, client_a, service_a, barber_a, barber_a2):
        mine = make_appointment(db_session, client=client_a, service=service_a, barber=barber_a,
                                start=datetime(2026, 10, 20, 10, 0))
        theirs = make_appointment(db_session, client=client_a, service=service_a, barber=barber_a2,
                                  start=datetime(2026, 10, 20, 11, 0))
        return mine, theirs

    def test_barber_lists_only_own(self, client, barber_headers, booked):
        mine, _ = booked
        resp = client.get("/api/appointments", headers=barber_headers)
        assert resp.status_code == 200
        assert [a["id"] for a in resp.json["items"]] == [mine.id]

    def test_barber_filter_for_other_barber_is_empty(self, client, barber_headers, booked, barber_a2):
        resp = client.get(f"/api/appointments?barber_id={barber_a2.id}", headers=barber_headers)
        assert resp.status_code == 200
        assert resp.json["items"] == []

    def test_admin_lists_all(self, client, admin_headers, booked):
        resp = client.get("/api/appointments", headers=admin_headers)
        assert resp.json["count"] == 2

    def test_barber_cannot_change_other_barbers_appointment(self, client, db_session, barber_headers, booked):
        _, theirs = booked
        resp = client.patch(f"/api/appointments/{theirs.id}/status", json={"status": "cancelled"}, headers=barber_headers)
        assert resp.status_code == 403
        db_session.refresh(theirs)
        assert theirs.status == "scheduled"

    def test_barber_cannot_book_for_other_barber(self, client, barber_headers, client_a, service_a, barber_a2):
        resp = client.post("/api/appointments", json={
            "client_id": client_a.id,
            "service_id": service_a.id,
            "barber_id": barber_a2.id,
            "start_time": "2026-10-21T09:00:00",
        }, headers=barber_headers)
        assert resp.status_code == 403
