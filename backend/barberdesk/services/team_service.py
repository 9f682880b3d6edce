# Overview: Service-layer operations for the team page; staff profiles, roles and working hours.

"""
Team (staff) management.

WORKING HOURS: {weekday: None | {"start": "HH:MM", "end": "HH:MM"}} for
monday..sunday. A missing key and None both mean day off. The helpers
below never mutate their input:
- toggle_day(on) always starts from DEFAULT_DAY_HOURS; hours configured
  before the day was switched off are not restored
- set_day_field on a day off starts from DEFAULT_DAY_HOURS
The map is advisory: appointments are not checked against it.
"""

from __future__ import annotations

import re

from ..extensions import db
from ..models import Profile, UserRole
from ..permissions import ROLE_ADMIN, ROLE_BARBER
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_profile,
    validate_payload,
)
from .auth_service import create_user
from .permission_service import assign_role
from .tenant_service import require_in_org, scoped_query


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DEFAULT_DAY_HOURS = {"start": "09:00", "end": "18:00"}
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

MEMBER_POLICY = ModelValidationPolicy(
    writable_fields={"full_name", "phone", "commission_rate", "is_active", "working_hours"},
    blank_to_null={"phone"},
)


# -- Working hours --

def _check_day(day: str) -> None:
    if day not in WEEKDAYS:
        raise ValidationError(f"day must be one of: {', '.join(WEEKDAYS)}")


def toggle_day(hours: dict | None, day: str, enabled: bool) -> dict:
    _check_day(day)
    updated = dict(hours or {})
    updated[day] = dict(DEFAULT_DAY_HOURS) if enabled else None
    return updated


def set_day_field(hours: dict | None, day: str, field: str, value: str) -> dict:
    _check_day(day)
    if field not in ("start", "end"):
        raise ValidationError("field must be 'start' or 'end'")
    updated = dict(hours or {})
    current = updated.get(day) or DEFAULT_DAY_HOURS
    updated[day] = {**current, field: value}
    return updated


def validate_working_hours(hours) -> dict | None:
    """Normalize a working-hours map; every weekday appears in the result."""
    if hours is None:
        return None
    if not isinstance(hours, dict):
        raise ValidationError("working_hours must be an object")

    unknown = [key for key in hours if key not in WEEKDAYS]
    if unknown:
        raise ValidationError(f"Unknown weekday: {', '.join(sorted(unknown))}")

    normalized: dict = {}
    for day in WEEKDAYS:
        value = hours.get(day)
        if value is None:
            normalized[day] = None
            continue
        if not isinstance(value, dict):
            raise ValidationError(f"working_hours.{day} must be null or {{start, end}}")
        start, end = value.get("start"), value.get("end")
        if not (isinstance(start, str) and TIME_RE.match(start)):
            raise ValidationError(f"working_hours.{day}.start must be HH:MM")
        if not (isinstance(end, str) and TIME_RE.match(end)):
            raise ValidationError(f"working_hours.{day}.end must be HH:MM")
        if end <= start:
            raise ValidationError(f"working_hours.{day}.end must be after start")
        normalized[day] = {"start": start, "end": end}
    return normalized


# -- Team --

def _roles_by_user(org_id: int) -> dict[int, str]:
    roles: dict[int, str] = {}
    for user_id, role in db.session.query(UserRole.user_id, UserRole.role).filter_by(org_id=org_id):
        if role == ROLE_ADMIN or user_id not in roles:
            roles[user_id] = role
    return roles


def member_to_dict(profile: Profile, role: str) -> dict:
    data = profile.to_dict()
    data["role"] = role
    return data


def list_team(org_id: int, search: str | None = None) -> list[dict]:
    """Profiles ordered by name, each with its role (barber when none is stored)."""
    query = scoped_query(Profile, org_id)
    if search and search.strip():
        query = query.filter(Profile.full_name.ilike(f"%{search.strip()}%"))
    roles = _roles_by_user(org_id)
    return [
        member_to_dict(profile, roles.get(profile.user_id, ROLE_BARBER))
        for profile in query.order_by(Profile.full_name.asc(), Profile.id.asc()).all()
    ]


def list_barbers(org_id: int) -> list[Profile]:
    """Active staff that can be booked."""
    return (
        scoped_query(Profile, org_id)
        .filter(Profile.is_active.is_(True))
        .order_by(Profile.full_name.asc())
        .all()
    )


def create_barber(org_id: int, payload: dict) -> dict:
    """
    Add a staff member: login identity + profile + barber role, one transaction.

    Raises FieldValidationError / ConflictError from auth_service for the
    identity fields.
    """
    payload = dict(payload or {})
    patch = validate_payload(
        model=Profile,
        payload={k: v for k, v in payload.items() if k in {"phone", "commission_rate", "working_hours"}},
        policy=MEMBER_POLICY,
        partial=True,
    )
    enforce_rules_profile(patch)
    if "working_hours" in patch:
        patch["working_hours"] = validate_working_hours(patch["working_hours"])
    user = create_user(payload.get("email"), payload.get("password"), payload.get("full_name"))

    profile = Profile(
        org_id=org_id,
        user_id=user.id,
        full_name=user.full_name,
        is_active=True,
        commission_rate=patch.pop("commission_rate", 0),
        **patch,
    )
    db.session.add(profile)
    assign_role(user.id, org_id, ROLE_BARBER)
    db.session.commit()
    return member_to_dict(profile, ROLE_BARBER)


def update_member(org_id: int, profile_id: int, payload: dict, *, acting_profile_id: int | None = None) -> dict:
    profile = require_in_org(Profile, profile_id, org_id, label="Profile")
    patch = validate_payload(model=Profile, payload=payload, policy=MEMBER_POLICY, partial=True)
    enforce_rules_profile(patch)

    if "full_name" in patch and len(patch["full_name"]) < 2:
        raise ValidationError("full_name must be at least 2 characters")
    if "working_hours" in patch:
        patch["working_hours"] = validate_working_hours(patch["working_hours"])
    if patch.get("is_active") is False and profile.id == acting_profile_id:
        raise ValidationError("You cannot deactivate your own profile")

    for key, value in patch.items():
        setattr(profile, key, value)
    db.session.commit()
    return member_to_dict(profile, _roles_by_user(org_id).get(profile.user_id, ROLE_BARBER))
