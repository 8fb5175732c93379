"""
Event Classifier
================
Decides whether a verified Stripe event is a completed card capture worth
writing to the ledger. Everything else is ignored without error.
"""

from typing import Any, Dict, Optional

import structlog

from schemas.landing_models import CaptureIntent, UtmData, VerifiedEvent
from schemas.tiers import CONFIRMED_SUFFIX

logger = structlog.get_logger(component="event_classifier")

CHECKOUT_COMPLETED = "checkout.session.completed"
SETUP_MODE = "setup"
UNKNOWN = "unknown"


def _ref(value: Any) -> str:
    """Stripe ids arrive as strings, or as dicts when the object was expanded."""
    if isinstance(value, dict):
        value = value.get("id")
    return str(value) if value else ""


def _text(mapping: Dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    return str(value) if value else ""


def extract_email(session: Dict[str, Any]) -> str:
    details = session.get("customer_details") or {}
    return (
        session.get("customer_email")
        or (details.get("email") if isinstance(details, dict) else None)
        or UNKNOWN
    )


def classify(event: VerifiedEvent) -> Optional[CaptureIntent]:
    """
    Return a CaptureIntent for a completed setup-mode checkout session.

    Returns None (ignore) for any other event type or session mode; this
    pipeline never records live charges.
    """
    if event.event_type != CHECKOUT_COMPLETED:
        logger.debug("event_ignored", event_type=event.event_type, reason="event_type")
        return None

    session = event.data_object
    mode = session.get("mode")
    if mode != SETUP_MODE:
        logger.info("event_ignored", event_type=event.event_type, mode=mode, reason="mode")
        return None

    metadata = session.get("metadata") or {}
    if not isinstance(metadata, dict):
        metadata = {}

    return CaptureIntent(
        email=extract_email(session),
        tier_label=(_text(metadata, "tier") or UNKNOWN) + CONFIRMED_SUFFIX,
        utm=UtmData(
            utm_source=_text(metadata, "utm_source"),
            utm_medium=_text(metadata, "utm_medium"),
            utm_campaign=_text(metadata, "utm_campaign"),
            utm_content=_text(metadata, "utm_content"),
        ),
        external_customer_ref=_ref(session.get("customer")),
        external_setup_ref=_ref(session.get("setup_intent")),
        captured=True,
    )
