# schemas/tiers.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — TIER CATALOGUE
# ============================================================================
# Static founding-member tiers. Amounts are what the checkout page shows;
# nothing here is ever charged.
# ============================================================================

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Tier(str, Enum):
    WAITLIST = "waitlist"
    STARTER = "starter"
    FOUNDING_PRO = "founding_pro"
    STARTER_PENDING = "starter_PENDING"
    FOUNDING_PRO_PENDING = "founding_pro_PENDING"


SUBMISSION_TIERS = frozenset(t.value for t in Tier)
CHECKOUT_TIERS = frozenset({Tier.STARTER.value, Tier.FOUNDING_PRO.value})

# Appended to the tier of a confirmed card capture so it can be told apart
# from the pending signup row for the same person.
CONFIRMED_SUFFIX = "_CONFIRMED"


class TierDescriptor(BaseModel):
    """Human-readable description of a tier."""
    model_config = ConfigDict(frozen=True)

    tier_id: str
    name: str
    description: str
    amount: Optional[int] = Field(default=None, description="Display amount in cents")
    submit_message: str


TIER_CATALOGUE: Dict[str, TierDescriptor] = {
    Tier.WAITLIST.value: TierDescriptor(
        tier_id=Tier.WAITLIST.value,
        name="Waitlist",
        description="Early access updates for Leadership Companion.",
        submit_message="You're on the waitlist! We'll email you when we launch.",
    ),
    Tier.STARTER.value: TierDescriptor(
        tier_id=Tier.STARTER.value,
        name="Founding Starter — $29 AUD/month (locked for life)",
        description=(
            "Your card will be saved securely. You will NOT be charged until we launch. "
            "Your founding rate of $29/month is locked in for life."
        ),
        amount=2900,
        submit_message="Your Founding Starter spot is reserved.",
    ),
    Tier.FOUNDING_PRO.value: TierDescriptor(
        tier_id=Tier.FOUNDING_PRO.value,
        name="Founding Pro — $49 AUD/month (first year, then $59)",
        description=(
            "Your card will be saved securely. You will NOT be charged until we launch. "
            "Your founding rate of $49/month is locked in for the first year."
        ),
        amount=4900,
        submit_message="Your Founding Pro spot is reserved.",
    ),
    Tier.STARTER_PENDING.value: TierDescriptor(
        tier_id=Tier.STARTER_PENDING.value,
        name="Founding Starter (pending card capture)",
        description="Signup recorded before the checkout page.",
        amount=2900,
        submit_message="Almost there! Complete checkout to lock in your Founding Starter rate.",
    ),
    Tier.FOUNDING_PRO_PENDING.value: TierDescriptor(
        tier_id=Tier.FOUNDING_PRO_PENDING.value,
        name="Founding Pro (pending card capture)",
        description="Signup recorded before the checkout page.",
        amount=4900,
        submit_message="Almost there! Complete checkout to lock in your Founding Pro rate.",
    ),
}

# Shown above the submit button on the Stripe page
CHECKOUT_SUBMIT_NOTE = {
    Tier.STARTER.value: "$29 AUD/month locked for life.",
    Tier.FOUNDING_PRO.value: "$49 AUD/month for your first year (then $59).",
}


def get_tier(tier_id: str) -> TierDescriptor:
    """Look up a tier descriptor. Raises KeyError for unknown tiers."""
    return TIER_CATALOGUE[tier_id]
