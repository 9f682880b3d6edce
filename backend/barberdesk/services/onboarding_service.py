# Overview: Service-layer operations for onboarding; creates a barbershop and its first admin.

"""
Onboarding: turn a signed-up identity into the admin of a new barbershop.

One transaction creates the Organization, the caller's Profile and the
admin UserRole, then binds the caller's session to the new organization
so the next request already carries tenant context.
"""

import re
import unicodedata

from flask import current_app

from ..extensions import db
from ..models import Organization, Profile, SessionToken, User
from ..permissions import ROLE_ADMIN
from ..validation import ConflictError, FieldValidationError
from .permission_service import assign_role
from .session_service import bind_session_to_org


SLUG_RE = re.compile(r"^[a-z0-9-]+$")
MIN_LENGTH = 2


def slugify(name: str) -> str:
    """
    URL-safe slug from a shop name.

    "Barbearia São João" -> "barbearia-sao-joao"
    """
    decomposed = unicodedata.normalize("NFD", (name or "").lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s-]", "", ascii_only)
    dashed = re.sub(r"\s+", "-", cleaned.strip())
    return re.sub(r"-+", "-", dashed)


def _clean(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def validate_onboarding(payload: dict) -> dict:
    """
    Field-level validation of the onboarding form.

    Returns the cleaned values; raises FieldValidationError with every
    failing field at once.
    """
    org_name = _clean(payload.get("organization_name")) or ""
    slug = _clean(payload.get("slug")) or slugify(org_name)
    full_name = _clean(payload.get("full_name")) or ""

    errors: dict[str, str] = {}
    if len(org_name) < MIN_LENGTH:
        errors["organization_name"] = f"Name must be at least {MIN_LENGTH} characters"
    if len(slug) < MIN_LENGTH:
        errors["slug"] = f"Slug must be at least {MIN_LENGTH} characters"
    elif not SLUG_RE.match(slug):
        errors["slug"] = "Slug may only contain lowercase letters, numbers and hyphens"
    if len(full_name) < MIN_LENGTH:
        errors["full_name"] = f"Name must be at least {MIN_LENGTH} characters"
    if errors:
        raise FieldValidationError(errors)

    return {
        "organization_name": org_name,
        "slug": slug,
        "organization_phone": _clean(payload.get("organization_phone")),
        "address": _clean(payload.get("address")),
        "full_name": full_name,
        "phone": _clean(payload.get("phone")),
    }


def complete_onboarding(*, user: User, session: SessionToken | None, payload: dict) -> tuple[Organization, Profile]:
    """
    Create organization + admin profile + admin role for user.

    Raises:
        FieldValidationError: form fields invalid
        ConflictError: user already has a profile, or slug is taken
    """
    data = validate_onboarding(payload)

    if db.session.query(Profile).filter_by(user_id=user.id).first():
        raise ConflictError("User already belongs to an organization")

    if db.session.query(Organization).filter_by(slug=data["slug"]).first():
        raise ConflictError("Slug already in use")

    org = Organization(
        name=data["organization_name"],
        slug=data["slug"],
        phone=data["organization_phone"],
        address=data["address"],
        timezone=current_app.config.get("DEFAULT_TIMEZONE", "UTC"),
        is_active=True,
    )
    db.session.add(org)
    db.session.flush()

    profile = Profile(
        org_id=org.id,
        user_id=user.id,
        full_name=data["full_name"],
        phone=data["phone"],
        is_active=True,
        commission_rate=0,
    )
    db.session.add(profile)
    assign_role(user.id, org.id, ROLE_ADMIN)

    if session is not None:
        bind_session_to_org(session, org.id)

    db.session.commit()
    current_app.logger.info("Onboarded organization %s (id=%s) for user %s", org.slug, org.id, user.id)
    return org, profile
