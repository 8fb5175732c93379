"""
Signature Verifier
==================
Checks that a webhook body was signed by Stripe and is recent enough.

The signature covers the exact request bytes, so the body must reach this
module untouched: parsing and re-serialising JSON first changes the bytes
and every signature check fails.
"""

import json
from typing import Optional, Union

import stripe
import structlog

from errors import VerificationError
from schemas.landing_models import VerifiedEvent

logger = structlog.get_logger(component="signature_verifier")

SIGNATURE_HEADER = "stripe-signature"
DEFAULT_TOLERANCE_SECONDS = 300


class SignatureVerifier:
    """Stripe webhook signature verification (HMAC-SHA256, t=/v1= header)."""

    def __init__(self, secret: str, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS):
        self.secret = secret
        self.tolerance_seconds = tolerance_seconds

    def verify(self, raw_body: Union[bytes, str], signature_header: Optional[str]) -> VerifiedEvent:
        """
        Verify and decode a webhook notification.

        Raises:
            VerificationError: the notification must not be processed.
        """
        return verify(raw_body, signature_header, self.secret, self.tolerance_seconds)


def verify(
    raw_body: Union[bytes, str],
    signature_header: Optional[str],
    secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
) -> VerifiedEvent:
    if not secret:
        logger.error("webhook_secret_missing")
        raise VerificationError("Webhook signing secret not configured")

    if not signature_header:
        raise VerificationError("Missing Stripe-Signature header")

    if isinstance(raw_body, bytes):
        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            raise VerificationError("Payload is not valid UTF-8")
    else:
        payload = raw_body

    try:
        stripe.WebhookSignature.verify_header(payload, signature_header, secret, tolerance_seconds)
    except stripe.SignatureVerificationError as e:
        logger.warning("webhook_signature_invalid", error=str(e))
        raise VerificationError(str(e))

    try:
        event = json.loads(payload)
    except ValueError:
        raise VerificationError("Invalid payload")

    if not isinstance(event, dict):
        raise VerificationError("Invalid payload")

    return VerifiedEvent(
        event_type=str(event.get("type") or "unknown"),
        event_id=str(event.get("id") or ""),
        payload=event,
    )
