# services/signups.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — SIGNUP SUBMISSIONS
# ============================================================================
# Waitlist and founding-member form submissions. Unlike the webhook path, a
# failed ledger write here fails the request: nothing else has recorded
# the signup.
# ============================================================================

import re
from typing import Optional

import structlog

from errors import SinkError, UpstreamServiceError, ValidationError
from schemas.landing_models import LedgerRecord, UtmData
from schemas.tiers import SUBMISSION_TIERS, TierDescriptor, get_tier
from storage.ledger import LedgerSink

logger = structlog.get_logger(component="signups")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254


def is_valid_email(email: Optional[str]) -> bool:
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_PATTERN.match(email) is not None


def build_signup_record(
    email: str,
    tier: str,
    utm: Optional[UtmData] = None,
    page_url: Optional[str] = None,
) -> LedgerRecord:
    utm = utm or UtmData()
    return LedgerRecord(
        email=email,
        tier_label=tier,
        utm_source=utm.utm_source,
        utm_medium=utm.utm_medium,
        utm_campaign=utm.utm_campaign,
        utm_content=utm.utm_content,
        captured=False,
        source="website",
        page_url=page_url or "",
    )


async def submit_signup(
    sink: LedgerSink,
    email: Optional[str],
    tier: Optional[str],
    utm: Optional[UtmData] = None,
    page_url: Optional[str] = None,
) -> TierDescriptor:
    """
    Validate and record a signup.

    Returns:
        The tier descriptor, whose submit_message is shown to the visitor.

    Raises:
        ValidationError: bad email or tier.
        UpstreamServiceError: the ledger write failed.
    """
    email = (email or "").strip()
    if not is_valid_email(email):
        raise ValidationError("A valid email address is required")

    if tier not in SUBMISSION_TIERS:
        raise ValidationError("Invalid tier")

    record = build_signup_record(email, tier, utm, page_url)

    try:
        ack = await sink.append(record)
    except SinkError as e:
        logger.error("signup_failed", tier=tier, backend=e.backend, error=e.message)
        raise UpstreamServiceError("Something went wrong. Please try again.") from e

    logger.info("signup_recorded", tier=tier, backend=ack.backend)
    return get_tier(tier)
