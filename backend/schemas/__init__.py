# schemas/__init__.py
from schemas.landing_models import (
    UtmData,
    CheckoutRequest,
    SubmitRequest,
    VerifiedEvent,
    CaptureIntent,
    LedgerRecord,
    LedgerAck,
    CheckoutResult,
    CountCacheEntry,
)
from schemas.tiers import Tier, TierDescriptor, TIER_CATALOGUE

__all__ = [
    "UtmData",
    "CheckoutRequest",
    "SubmitRequest",
    "VerifiedEvent",
    "CaptureIntent",
    "LedgerRecord",
    "LedgerAck",
    "CheckoutResult",
    "CountCacheEntry",
    "Tier",
    "TierDescriptor",
    "TIER_CATALOGUE",
]
