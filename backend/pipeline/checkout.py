"""
Checkout Service
================
Creates Stripe Checkout Sessions in "setup" mode: the card is saved for
the founding-member rate but nothing is charged until launch.

Tier amounts are display-only. No price or line item is sent to Stripe.
"""

import asyncio
from datetime import datetime, timezone
from functools import partial
from typing import Optional

import stripe
import structlog

from config import get_config
from errors import UpstreamServiceError, ValidationError
from schemas.landing_models import CheckoutResult, UtmData
from schemas.tiers import CHECKOUT_SUBMIT_NOTE, CHECKOUT_TIERS, get_tier

logger = structlog.get_logger(component="checkout")

DEFAULT_DOMAIN_URL = "https://leadershipcompanion.co"


class CheckoutService:
    """
    Founding-member checkout.

    Example:
        service = CheckoutService(api_key, "https://leadershipcompanion.co")
        result = await service.create_checkout("a@b.com", "starter", UtmData())
        # redirect the browser to result.checkout_url
    """

    def __init__(self, api_key: str, domain_url: str = DEFAULT_DOMAIN_URL):
        self.api_key = api_key
        self.domain_url = (domain_url or DEFAULT_DOMAIN_URL).rstrip("/")

    def build_session_params(self, email: str, tier: str, utm: UtmData) -> dict:
        """Keyword arguments for stripe.checkout.Session.create."""
        return {
            "mode": "setup",
            "payment_method_types": ["card"],
            "customer_email": email,
            "metadata": {
                "tier": tier,
                "utm_source": utm.utm_source,
                "utm_medium": utm.utm_medium,
                "utm_campaign": utm.utm_campaign,
                "utm_content": utm.utm_content,
                "signup_timestamp": datetime.now(timezone.utc).isoformat(),
            },
            "custom_text": {
                "submit": {
                    "message": (
                        "You will NOT be charged today. Your card is saved securely and will only be "
                        f"charged when Leadership Companion launches. {CHECKOUT_SUBMIT_NOTE[tier]}"
                    ),
                },
            },
            "success_url": f"{self.domain_url}/success.html?tier={tier}&session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{self.domain_url}/#founding-members",
        }

    async def create_checkout(self, email: Optional[str], tier: Optional[str], utm: Optional[UtmData] = None) -> CheckoutResult:
        if not email or not tier:
            raise ValidationError("Email and tier are required")

        if tier not in CHECKOUT_TIERS:
            raise ValidationError("Invalid tier for checkout")

        descriptor = get_tier(tier)
        params = self.build_session_params(email, tier, utm or UtmData())

        log = logger.bind(tier=tier)
        log.info("checkout_initiated", display_amount=descriptor.amount)

        create = partial(stripe.checkout.Session.create, api_key=self.api_key, **params)
        try:
            session = await asyncio.get_running_loop().run_in_executor(None, create)
        except Exception as e:
            log.error("checkout_failed", error=str(e), error_type=type(e).__name__)
            raise UpstreamServiceError("Failed to create checkout session. Please try again.") from e

        url = getattr(session, "url", None)
        if not url:
            log.error("checkout_failed", error="session has no url")
            raise UpstreamServiceError("Failed to create checkout session. Please try again.")

        log.info("checkout_created", stripe_session_id=session.id)
        return CheckoutResult(
            checkout_url=url,
            stripe_session_id=session.id,
            tier=tier,
            amount=descriptor.amount,
        )


# Singleton instance
_service_instance: Optional[CheckoutService] = None


def get_checkout_service() -> CheckoutService:
    """Get or create the process-wide checkout service."""
    global _service_instance
    if _service_instance is None:
        config = get_config()
        _service_instance = CheckoutService(config.stripe_secret_key, config.domain_url)
    return _service_instance
