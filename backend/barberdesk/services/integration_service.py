# Overview: Service-layer operations for the outbound webhook integration.

"""
Outbound Webhook Integration

One Integration row per organization holds the receiver URL (e.g. an n8n
workflow that forwards to WhatsApp) and an opaque api_key for it.

DISPATCH SEMANTICS: a POST counts as delivered when it was sent without a
transport error. The response status and body are not inspected, so a
receiver answering 500 still counts as dispatched.

Event delivery after appointment changes is best effort: failures are
logged and never fail the request that triggered them.
"""

from __future__ import annotations

import httpx
from flask import current_app

from ..extensions import db
from ..models import Integration
from ..validation import ModelValidationPolicy, enforce_rules_integration, validate_payload
from barberdesk.time_utils import to_utc_z, utcnow


INTEGRATION_NAME = "n8n WhatsApp Integration"
TEST_MESSAGE = "BarberDesk integration test"

INTEGRATION_POLICY = ModelValidationPolicy(
    writable_fields={"webhook_url", "api_key", "is_active"},
    blank_to_null={"webhook_url", "api_key"},
)


class WebhookDispatchError(Exception):
    """The webhook request could not be sent (DNS, connect, timeout...)."""


def get_integration(org_id: int) -> Integration | None:
    return db.session.query(Integration).filter_by(org_id=org_id).first()


def save_integration(org_id: int, payload: dict, profile_id: int | None = None) -> Integration:
    """Create or update the organization's integration."""
    patch = validate_payload(model=Integration, payload=payload, policy=INTEGRATION_POLICY, partial=True)
    enforce_rules_integration(patch)

    integration = get_integration(org_id)
    if integration is None:
        integration = Integration(
            org_id=org_id,
            name=INTEGRATION_NAME,
            is_active=False,
            created_by_profile_id=profile_id,
        )
        db.session.add(integration)

    for key, value in patch.items():
        setattr(integration, key, value)
    db.session.commit()
    return integration


def build_test_payload(org_id: int) -> dict:
    return {
        "event": "test",
        "timestamp": to_utc_z(utcnow()),
        "data": {
            "message": TEST_MESSAGE,
            "organization_id": org_id,
            "test": True,
        },
    }


def build_http_client() -> httpx.Client:
    return httpx.Client(timeout=current_app.config.get("WEBHOOK_TIMEOUT_SECONDS", 10))


def dispatch(url: str, payload: dict, api_key: str | None = None) -> None:
    """POST payload as JSON; raise WebhookDispatchError on transport failure."""
    headers = {"X-Api-Key": api_key} if api_key else {}
    try:
        with build_http_client() as client:
            client.post(url, json=payload, headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise WebhookDispatchError(f"Webhook request failed: {e.__class__.__name__}") from e


def send_test_webhook(org_id: int, webhook_url: str | None = None) -> dict:
    """
    Send the test payload to webhook_url (or the saved URL).

    Raises ValueError when no URL is available, WebhookDispatchError when
    the request cannot be sent.
    """
    integration = get_integration(org_id)
    url = webhook_url or (integration.webhook_url if integration else None)
    if not url:
        raise ValueError("Webhook URL is not configured")
    enforce_rules_integration({"webhook_url": url})

    payload = build_test_payload(org_id)
    dispatch(url, payload, api_key=integration.api_key if integration else None)
    current_app.logger.info("Dispatched test webhook for org %s", org_id)
    return {"dispatched": True, "webhook_url": url, "payload": payload}


def deliver_event(org_id: int, event: str, data: dict) -> bool:
    """
    Best-effort event delivery to the active integration.

    Returns True when dispatched, False when skipped or failed.
    """
    if not current_app.config.get("WEBHOOK_DELIVERY_ENABLED", True):
        return False

    integration = get_integration(org_id)
    if integration is None or not integration.is_active or not integration.webhook_url:
        return False

    payload = {
        "event": event,
        "timestamp": to_utc_z(utcnow()),
        "data": {**data, "organization_id": org_id},
    }
    try:
        dispatch(integration.webhook_url, payload, api_key=integration.api_key)
    except WebhookDispatchError:
        current_app.logger.warning("Failed to deliver %s webhook for org %s", event, org_id, exc_info=True)
        return False
    return True
