# schemas/landing_models.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — DATA MODELS
# ============================================================================
# Request bodies, the trusted webhook event, and the append-only ledger row
# shared by confirmed captures and waitlist signups.
# ============================================================================

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


CAPTURED_FLAG = "YES — card captured"
NOT_CAPTURED_FLAG = "NO"


def utc_now_iso() -> str:
    """ISO-8601 timestamp in UTC with a trailing Z, as the ledger stores it."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ============================================================================
# SECTION 1: REQUEST BODIES
# ============================================================================

class UtmData(BaseModel):
    """Campaign attribution forwarded from the landing page query string."""
    model_config = ConfigDict(extra="ignore")

    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_content: str = ""

    @field_validator("utm_source", "utm_medium", "utm_campaign", "utm_content", mode="before")
    @classmethod
    def _blank_if_missing(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class CheckoutRequest(BaseModel):
    """Body of POST /api/create-checkout."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    tier: Optional[str] = None
    utm_data: Optional[UtmData] = Field(default=None, alias="utmData")


class SubmitRequest(BaseModel):
    """Body of POST /api/submit."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    tier: Optional[str] = None
    utm_data: Optional[UtmData] = Field(default=None, alias="utmData")
    page_url: Optional[str] = Field(default=None, alias="pageUrl")


# ============================================================================
# SECTION 2: WEBHOOK PIPELINE
# ============================================================================

class VerifiedEvent(BaseModel):
    """
    A Stripe event whose signature has been checked.

    Only SignatureVerifier.verify builds these; everything downstream can
    trust the payload without re-checking it.
    """
    model_config = ConfigDict(frozen=True)

    event_type: str
    event_id: str = ""
    payload: Dict[str, Any]

    @property
    def data_object(self) -> Dict[str, Any]:
        data = self.payload.get("data") or {}
        obj = data.get("object") if isinstance(data, dict) else None
        return obj if isinstance(obj, dict) else {}


class CaptureIntent(BaseModel):
    """Fields extracted from a completed setup-mode checkout session."""
    model_config = ConfigDict(frozen=True)

    email: str
    tier_label: str
    utm: UtmData = Field(default_factory=UtmData)
    external_customer_ref: str = ""
    external_setup_ref: str = ""
    captured: bool = True

    def to_record(self, timestamp: Optional[str] = None) -> "LedgerRecord":
        return LedgerRecord(
            timestamp=timestamp or utc_now_iso(),
            email=self.email,
            tier_label=self.tier_label,
            utm_source=self.utm.utm_source,
            utm_medium=self.utm.utm_medium,
            utm_campaign=self.utm.utm_campaign,
            utm_content=self.utm.utm_content,
            external_customer_ref=self.external_customer_ref,
            external_setup_ref=self.external_setup_ref,
            captured=self.captured,
            source="stripe_webhook",
            page_url=f"setup_intent:{self.external_setup_ref}",
        )


# ============================================================================
# SECTION 3: LEDGER
# ============================================================================

class LedgerRecord(BaseModel):
    """One append-only ledger row. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(default_factory=utc_now_iso)
    email: str
    tier_label: str
    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_content: str = ""
    external_customer_ref: str = ""
    external_setup_ref: str = ""
    captured: bool = False

    # Only the form backend has columns for these
    source: str = "website"
    page_url: str = ""

    def sheet_row(self) -> List[str]:
        """Values in ledger column order (A through J)."""
        return [
            self.timestamp,
            self.email,
            self.tier_label,
            self.utm_source,
            self.utm_medium,
            self.utm_campaign,
            self.utm_content,
            self.external_customer_ref,
            self.external_setup_ref,
            CAPTURED_FLAG if self.captured else NOT_CAPTURED_FLAG,
        ]

    def form_values(self) -> Dict[str, str]:
        """Values keyed by logical form field name."""
        return {
            "email": self.email,
            "tier": self.tier_label,
            "source": self.source,
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "utm_content": self.utm_content,
            "page_url": self.page_url,
        }


class LedgerAck(BaseModel):
    """Result of a successful ledger append."""
    backend: str
    reference: Optional[str] = None


# ============================================================================
# SECTION 4: CHECKOUT + COUNT
# ============================================================================

class CheckoutResult(BaseModel):
    """Checkout session creation result"""
    checkout_url: str
    stripe_session_id: str
    tier: str
    amount: Optional[int] = None


class CountCacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int = Field(ge=0)
    fetched_at_epoch_ms: int
