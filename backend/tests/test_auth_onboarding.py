# Overview: Pytest coverage for sign-up, login, sessions and onboarding.

"""
Authentication and onboarding flow.

A new identity signs up, gets a token without tenant context, and only
after onboarding can reach tenant data. Onboarding creates the
organization, the admin profile and the admin role in one step.
"""

import pytest
from barberdesk.models import Organization, Profile, SecurityEvent, SessionToken, UserRole
from barberdesk.services.auth_service import (
    create_user, authenticate, hash_password, verify_password, normalize_email,
)
from barberdesk.services.onboarding_service import slugify, validate_onboarding
from barberdesk.services.session_service import create_session, revoke_session, validate_session
from barberdesk.validation import ConflictError, FieldValidationError
from conftest import auth_headers, get_auth_token


def _register(client, email="novo@shop.com", password="secret1", full_name="Novo Dono"):
    return client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "full_name": full_name,
    })


class TestPasswords:
    def test_hash_and_verify(self, app):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("wrong", hashed)

    def test_email_normalized(self):
        assert normalize_email("  Owner@Shop.COM ") == "owner@shop.com"


class TestSignUp:
    def test_register_returns_token_without_org(self, client, db_session):
        resp = _register(client)
        assert resp.status_code == 201
        assert resp.json["token"]
        assert resp.json["needs_onboarding"] is True
        assert resp.json["org_id"] is None

    def test_register_reports_every_bad_field(self, client, db_session):
        resp = _register(client, email="not-an-email", password="123", full_name="A")
        assert resp.status_code == 400
        assert set(resp.json["fields"]) == {"email", "password", "full_name"}

    def test_duplicate_email_conflicts(self, client, db_session):
        _register(client)
        resp = _register(client, email="NOVO@shop.com")
        assert resp.status_code == 409
        assert resp.json["error"] == "User already registered"

    def test_create_user_validates(self, db_session):
        with pytest.raises(FieldValidationError) as exc:
            create_user("bad", "1", "")
        assert "email" in exc.value.fields

    def test_create_user_duplicate(self, db_session):
        create_user("dup@shop.com", "secret1", "Dup User")
        db_session.commit()
        with pytest.raises(ConflictError):
            create_user("dup@shop.com", "secret1", "Dup User")


class TestLogin:
    def test_login_success(self, client, admin_a):
        resp = client.post("/api/auth/login", json={"email": "owner@alfa.com", "password": "Password123!"})
        assert resp.status_code == 200
        assert resp.json["role"] == "admin"
        assert resp.json["is_admin"] is True
        assert resp.json["needs_onboarding"] is False
        assert "VIEW_FINANCE" in resp.json["permissions"]

    def test_login_wrong_password_logs_event(self, client, db_session, admin_a):
        resp = client.post("/api/auth/login", json={"email": "owner@alfa.com", "password": "nope"})
        assert resp.status_code == 401
        assert db_session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").count() == 1

    def test_login_missing_fields(self, client, db_session):
        assert client.post("/api/auth/login", json={"email": "x@y.com"}).status_code == 400

    def test_inactive_user_cannot_authenticate(self, db_session, admin_a):
        admin_a.user.is_active = False
        db_session.commit()
        assert authenticate("owner@alfa.com", "Password123!") is None

    def test_login_into_inactive_org_is_refused(self, client, db_session, admin_a, org_a):
        org_a.is_active = False
        db_session.commit()
        resp = client.post("/api/auth/login", json={"email": "owner@alfa.com", "password": "Password123!"})
        assert resp.status_code == 403

    def test_logout_revokes_token(self, client, admin_a):
        token = get_auth_token(client, "owner@alfa.com")
        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_role_checks(self, client, barber_headers):
        assert client.get("/api/auth/is-admin", headers=barber_headers).json["is_admin"] is False
        assert client.get("/api/auth/has-role/barber", headers=barber_headers).json["has_role"] is True
        assert client.get("/api/auth/has-role/owner", headers=barber_headers).status_code == 400

    def test_permission_checks(self, client, barber_headers):
        resp = client.get("/api/auth/has-permission/VIEW_AGENDA", headers=barber_headers)
        assert resp.json["has_permission"] is True
        resp = client.get("/api/auth/has-permission/VIEW_FINANCE", headers=barber_headers)
        assert resp.json["has_permission"] is False
        assert client.get("/api/auth/has-permission/FLY", headers=barber_headers).status_code == 400

    def test_permission_catalog(self, client, barber_headers):
        categories = client.get("/api/auth/permissions", headers=barber_headers).json["categories"]
        agenda = {p["code"]: p["granted"] for p in categories["AGENDA"]}
        assert agenda == {"VIEW_AGENDA": True, "MANAGE_APPOINTMENTS": True, "VIEW_ALL_APPOINTMENTS": False}
        assert all(not p["granted"] for p in categories["FINANCE"])


class TestSessions:
    def test_session_without_profile_has_no_org(self, db_session):
        user = create_user("solo@shop.com", "secret1", "Solo User")
        db_session.commit()
        session, token = create_session(user_id=user.id)
        assert session.org_id is None
        context = validate_session(token)
        assert context.org_id is None
        assert context.profile is None

    def test_revoked_session_is_invalid(self, db_session, admin_a):
        _, token = create_session(user_id=admin_a.user_id)
        assert revoke_session(token) is True
        assert validate_session(token) is None

    def test_only_hash_is_stored(self, db_session, admin_a):
        _, token = create_session(user_id=admin_a.user_id)
        assert db_session.query(SessionToken).filter_by(token_hash=token).first() is None


class TestOnboarding:
    def test_slugify_strips_accents(self):
        assert slugify("Barbearia São João") == "barbearia-sao-joao"
        assert slugify("  Corte  &  Cia ") == "corte-cia"

    def test_validate_onboarding_derives_slug(self):
        data = validate_onboarding({"organization_name": "Navalha de Ouro", "full_name": "Rui"})
        assert data["slug"] == "navalha-de-ouro"

    def test_validate_onboarding_rejects_bad_slug(self):
        with pytest.raises(FieldValidationError) as exc:
            validate_onboarding({"organization_name": "Shop", "slug": "Bad Slug!", "full_name": "Rui"})
        assert "slug" in exc.value.fields

    def test_tenant_routes_need_onboarding(self, client, db_session):
        token = _register(client).json["token"]
        resp = client.get("/api/clients", headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.json["needs_onboarding"] is True

    def test_onboarding_creates_org_and_admin(self, client, db_session):
        token = _register(client).json["token"]
        resp = client.post("/api/onboarding", json={
            "organization_name": "Barbearia São João",
            "full_name": "Novo Dono",
            "phone": "11988887777",
        }, headers=auth_headers(token))
        assert resp.status_code == 201
        assert resp.json["organization"]["slug"] == "barbearia-sao-joao"
        assert resp.json["organization"]["timezone"] == "UTC"
        assert resp.json["role"] == "admin"

        org = db_session.query(Organization).filter_by(slug="barbearia-sao-joao").one()
        profile = db_session.query(Profile).filter_by(org_id=org.id).one()
        assert db_session.query(UserRole).filter_by(user_id=profile.user_id, org_id=org.id, role="admin").count() == 1

        # Same token now carries tenant context
        me = client.get("/api/auth/me", headers=auth_headers(token))
        assert me.json["org_id"] == org.id
        assert me.json["needs_onboarding"] is False
        assert client.get("/api/clients", headers=auth_headers(token)).status_code == 200

    def test_second_onboarding_conflicts(self, client, db_session):
        token = _register(client).json["token"]
        payload = {"organization_name": "Primeira", "full_name": "Novo Dono"}
        assert client.post("/api/onboarding", json=payload, headers=auth_headers(token)).status_code == 201
        payload = {"organization_name": "Segunda", "full_name": "Novo Dono"}
        assert client.post("/api/onboarding", json=payload, headers=auth_headers(token)).status_code == 409

    def test_taken_slug_conflicts(self, client, db_session, org_a):
        token = _register(client).json["token"]
        resp = client.post("/api/onboarding", json={
            "organization_name": "Outra", "slug": org_a.slug, "full_name": "Novo Dono",
        }, headers=auth_headers(token))
        assert resp.status_code == 409
        assert resp.json["error"] == "Slug already in use"

    def test_slug_suggestion(self, client, db_session):
        token = _register(client).json["token"]
        resp = client.get("/api/onboarding/slug?name=Corte Fino", headers=auth_headers(token))
        assert resp.json["slug"] == "corte-fino"
