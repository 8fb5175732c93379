import asyncio

import pytest

from errors import UpstreamServiceError, ValidationError
from schemas.landing_models import UtmData
from services.signups import build_signup_record, is_valid_email, submit_signup


@pytest.mark.parametrize("email,expected", [
    ("visitor@example.com", True),
    ("first.last+tag@sub.example.co", True),
    ("no-at-sign.example.com", False),
    ("spaces in@example.com", False),
    ("missing@tld", False),
    ("", False),
    (None, False),
])
def test_email_validation(email, expected):
    assert is_valid_email(email) is expected


def test_signup_record_is_pending_website_row():
    record = build_signup_record("v@example.com", "starter_PENDING", UtmData(utm_source="x"), "https://lc.co/")

    assert record.captured is False
    assert record.source == "website"
    assert record.sheet_row()[2] == "starter_PENDING"
    assert record.sheet_row()[9] == "NO"


def test_waitlist_signup_is_recorded(recording_sink):
    tier = asyncio.run(submit_signup(recording_sink, " visitor@example.com ", "waitlist", page_url="https://lc.co/"))

    assert tier.submit_message == "You're on the waitlist! We'll email you when we launch."
    assert recording_sink.attempts[0].email == "visitor@example.com"
    assert recording_sink.attempts[0].page_url == "https://lc.co/"


def test_invalid_tier_is_rejected(recording_sink):
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(submit_signup(recording_sink, "visitor@example.com", "gold"))

    assert exc_info.value.message == "Invalid tier"
    assert recording_sink.attempts == []


def test_invalid_email_is_rejected(recording_sink):
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(submit_signup(recording_sink, "nope", "waitlist"))

    assert exc_info.value.message == "A valid email address is required"


def test_sink_failure_fails_the_signup(failing_sink):
    with pytest.raises(UpstreamServiceError) as exc_info:
        asyncio.run(submit_signup(failing_sink, "visitor@example.com", "waitlist"))

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Something went wrong. Please try again."
