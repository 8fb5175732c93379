from conftest import checkout_completed_event
from pipeline.classifier import classify, extract_email
from schemas.landing_models import CAPTURED_FLAG, VerifiedEvent


def _event(payload):
    return VerifiedEvent(event_type=payload["type"], event_id=payload["id"], payload=payload)


def test_setup_mode_checkout_is_matched():
    intent = classify(_event(checkout_completed_event()))

    assert intent is not None
    assert intent.email == "founder@example.com"
    assert intent.tier_label == "starter_CONFIRMED"
    assert intent.utm.utm_source == "linkedin"
    assert intent.utm.utm_content == ""
    assert intent.external_customer_ref == "cus_Q1w2e3r4"
    assert intent.external_setup_ref == "seti_9z8y7x"
    assert intent.captured is True


def test_matched_intent_becomes_captured_row():
    intent = classify(_event(checkout_completed_event()))
    row = intent.to_record(timestamp="2026-10-01T09:31:00.000Z").sheet_row()

    assert row == [
        "2026-10-01T09:31:00.000Z",
        "founder@example.com",
        "starter_CONFIRMED",
        "linkedin",
        "social",
        "founding",
        "",
        "cus_Q1w2e3r4",
        "seti_9z8y7x",
        CAPTURED_FLAG,
    ]


def test_payment_mode_is_ignored():
    assert classify(_event(checkout_completed_event(mode="payment"))) is None


def test_other_event_types_are_ignored():
    payload = checkout_completed_event()
    payload["type"] = "payment_intent.succeeded"

    assert classify(_event(payload)) is None


def test_email_falls_back_to_customer_details():
    session = checkout_completed_event(customer_email=None)["data"]["object"]

    assert extract_email(session) == "details@example.com"


def test_missing_fields_default_to_unknown_and_blank():
    payload = checkout_completed_event(
        customer_email=None,
        customer_details=None,
        customer=None,
        setup_intent=None,
        metadata=None,
    )

    intent = classify(_event(payload))

    assert intent.email == "unknown"
    assert intent.tier_label == "unknown_CONFIRMED"
    assert intent.external_customer_ref == ""
    assert intent.external_setup_ref == ""
    assert intent.utm.utm_source == ""


def test_expanded_objects_collapse_to_ids():
    payload = checkout_completed_event(
        customer={"id": "cus_expanded", "object": "customer"},
        setup_intent={"id": "seti_expanded", "object": "setup_intent"},
    )

    intent = classify(_event(payload))

    assert intent.external_customer_ref == "cus_expanded"
    assert intent.external_setup_ref == "seti_expanded"
    assert intent.to_record().page_url == "setup_intent:seti_expanded"
