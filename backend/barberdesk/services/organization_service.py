# Overview: Service-layer operations for organization settings and the caller's own profile.

from __future__ import annotations

from ..extensions import db
from ..models import Organization, Profile
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from barberdesk.time_utils import get_zone

ORGANIZATION_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "email", "address", "logo_url", "timezone"},
    blank_to_null={"phone", "email", "address", "logo_url"},
)

OWN_PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={"full_name", "phone", "avatar_url"},
    blank_to_null={"phone", "avatar_url"},
)


def update_organization(org: Organization, payload: dict) -> Organization:
    patch = validate_payload(model=Organization, payload=payload, policy=ORGANIZATION_POLICY, partial=True)
    if "name" in patch and len(patch["name"]) < 2:
        raise ValidationError("name must be at least 2 characters")
    if "timezone" in patch and get_zone(patch["timezone"]).key != patch["timezone"]:
        raise ValidationError("timezone must be an IANA zone name")
    for key, value in patch.items():
        setattr(org, key, value)
    db.session.commit()
    return org


def update_own_profile(profile: Profile, payload: dict) -> Profile:
    patch = validate_payload(model=Profile, payload=payload, policy=OWN_PROFILE_POLICY, partial=True)
    if "full_name" in patch and len(patch["full_name"]) < 2:
        raise ValidationError("full_name must be at least 2 characters")
    for key, value in patch.items():
        setattr(profile, key, value)
    db.session.commit()
    return profile
