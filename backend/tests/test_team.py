# Overview: Pytest coverage for team management and working hours.

import pytest
from barberdesk.models import Profile, UserRole
from barberdesk.services import team_service
from barberdesk.services.team_service import (
    DEFAULT_DAY_HOURS, WEEKDAYS, set_day_field, toggle_day, validate_working_hours,
)
from barberdesk.validation import ValidationError
from conftest import auth_headers, get_auth_token


class TestWorkingHoursHelpers:
    def test_toggle_on_uses_defaults(self):
        hours = toggle_day({"monday": None}, "monday", True)
        assert hours["monday"] == DEFAULT_DAY_HOURS

    def test_toggle_off_then_on_forgets_custom_hours(self):
        hours = {"monday": {"start": "10:00", "end": "20:00"}}
        hours = toggle_day(hours, "monday", False)
        assert hours["monday"] is None
        hours = toggle_day(hours, "monday", True)
        assert hours["monday"] == DEFAULT_DAY_HOURS

    def test_helpers_do_not_mutate_input(self):
        original = {"tuesday": {"start": "09:00", "end": "18:00"}}
        set_day_field(original, "tuesday", "end", "17:00")
        toggle_day(original, "tuesday", False)
        assert original == {"tuesday": {"start": "09:00", "end": "18:00"}}

    def test_set_field_on_day_off_starts_from_defaults(self):
        hours = set_day_field({}, "friday", "start", "07:30")
        assert hours["friday"] == {"start": "07:30", "end": "18:00"}

    def test_unknown_day(self):
        with pytest.raises(ValidationError):
            toggle_day({}, "funday", True)

    def test_validate_normalizes_every_weekday(self):
        result = validate_working_hours({"monday": {"start": "09:00", "end": "18:00"}})
        assert set(result) == set(WEEKDAYS)
        assert result["sunday"] is None

    @pytest.mark.parametrize("hours", [
        {"monday": {"start": "9:00", "end": "18:00"}},
        {"monday": {"start": "18:00", "end": "09:00"}},
        {"monday": {"start": "24:00", "end": "25:00"}},
        {"monday": "all day"},
        {"someday": None},
        ["monday"],
    ])
    def test_validate_rejects(self, hours):
        with pytest.raises(ValidationError):
            validate_working_hours(hours)


class TestTeamService:
    def test_list_team_includes_roles(self, db_session, org_a, admin_a, barber_a):
        members = {m["full_name"]: m for m in team_service.list_team(org_a.id)}
        assert members["Ana Owner"]["role"] == "admin"
        assert members["Bruno Barber"]["role"] == "barber"

    def test_search(self, db_session, org_a, admin_a, barber_a):
        assert [m["full_name"] for m in team_service.list_team(org_a.id, search="brun")] == ["Bruno Barber"]

    def test_list_barbers_skips_inactive(self, db_session, org_a, admin_a, barber_a):
        barber_a.is_active = False
        db_session.commit()
        assert [p.full_name for p in team_service.list_barbers(org_a.id)] == ["Ana Owner"]


class TestTeamApi:
    def test_create_barber_can_log_in(self, client, db_session, org_a, admin_headers):
        resp = client.post("/api/team", json={
            "email": "diego@alfa.com",
            "password": "navalha1",
            "full_name": "Diego Barber",
            "commission_rate": 35,
        }, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["role"] == "barber"
        assert resp.json["commission_rate"] == 35.0

        profile = db_session.get(Profile, resp.json["id"])
        assert profile.org_id == org_a.id
        assert db_session.query(UserRole).filter_by(user_id=profile.user_id, role="barber").count() == 1

        token = get_auth_token(client, "diego@alfa.com", "navalha1")
        me = client.get("/api/auth/me", headers=auth_headers(token)).json
        assert me["role"] == "barber"
        assert me["org_id"] == org_a.id

    def test_create_barber_field_errors(self, client, admin_headers):
        resp = client.post("/api/team", json={"email": "bad", "password": "1", "full_name": "D"}, headers=admin_headers)
        assert resp.status_code == 400
        assert set(resp.json["fields"]) == {"email", "password", "full_name"}

    def test_create_barber_duplicate_email(self, client, admin_headers, barber_a):
        resp = client.post("/api/team", json={
            "email": "bruno@alfa.com", "password": "secret1", "full_name": "Bruno Again",
        }, headers=admin_headers)
        assert resp.status_code == 409

    def test_bad_commission_rate(self, client, admin_headers):
        resp = client.post("/api/team", json={
            "email": "eva@alfa.com", "password": "secret1", "full_name": "Eva", "commission_rate": 120,
        }, headers=admin_headers)
        assert resp.status_code == 400

    def test_update_member(self, client, admin_headers, barber_a):
        resp = client.patch(f"/api/team/{barber_a.id}", json={"commission_rate": "45.5", "phone": ""},
                            headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["commission_rate"] == 45.5
        assert resp.json["phone"] is None

    def test_cannot_deactivate_self(self, client, admin_headers, admin_a):
        resp = client.patch(f"/api/team/{admin_a.id}", json={"is_active": False}, headers=admin_headers)
        assert resp.status_code == 400

    def test_deactivated_barber_is_logged_out(self, client, admin_headers, barber_a, barber_headers):
        assert client.patch(f"/api/team/{barber_a.id}", json={"is_active": False}, headers=admin_headers).status_code == 200
        assert client.get("/api/appointments", headers=barber_headers).status_code == 401

    def test_toggle_working_day(self, client, admin_headers, barber_a):
        resp = client.patch(f"/api/team/{barber_a.id}/working-hours/monday", json={"enabled": True}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["working_hours"]["monday"] == DEFAULT_DAY_HOURS
        assert resp.json["working_hours"]["sunday"] is None

        resp = client.patch(f"/api/team/{barber_a.id}/working-hours/monday",
                            json={"field": "end", "value": "20:00"}, headers=admin_headers)
        assert resp.json["working_hours"]["monday"] == {"start": "09:00", "end": "20:00"}

    def test_bad_working_hours_value(self, client, admin_headers, barber_a):
        resp = client.patch(f"/api/team/{barber_a.id}/working-hours/monday",
                            json={"field": "end", "value": "8pm"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_foreign_member_is_404(self, client, admin_headers, admin_b):
        assert client.patch(f"/api/team/{admin_b.id}", json={"phone": "1"}, headers=admin_headers).status_code == 404
