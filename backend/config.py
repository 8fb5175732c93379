# config.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — CONFIGURATION
# ============================================================================
# Deployment settings read from the environment. Values are secrets; only
# the names live in code.
# ============================================================================

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


LEDGER_BACKENDS = ("sheets", "form")

# Form field names -> environment variable holding the Google Form entry id
FORM_FIELD_ENV = {
    "email": "EMAIL_FIELD_ID",
    "tier": "TIER_FIELD_ID",
    "source": "SOURCE_FIELD_ID",
    "utm_source": "UTM_SOURCE_FIELD_ID",
    "utm_medium": "UTM_MEDIUM_FIELD_ID",
    "utm_campaign": "UTM_CAMPAIGN_FIELD_ID",
    "utm_content": "UTM_CONTENT_FIELD_ID",
    "page_url": "PAGE_URL_FIELD_ID",
}


@dataclass
class LandingConfig:
    """Configuration for the landing page handlers."""
    env: str = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    webhook_tolerance_seconds: int = 300
    domain_url: str = "https://leadershipcompanion.co"

    # Ledger
    ledger_backend: str = "sheets"
    google_client_email: str = ""
    google_private_key: str = ""
    google_sheet_id: str = ""
    google_form_id: str = ""
    form_field_ids: Dict[str, str] = field(default_factory=dict)

    # Count
    count_endpoint_url: Optional[str] = None
    count_cache_ttl_seconds: float = 60.0

    # Timeouts
    ledger_timeout_seconds: float = 8.0
    http_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "LandingConfig":
        backend = os.getenv("LEDGER_BACKEND", "sheets").strip().lower()
        if backend not in LEDGER_BACKENDS:
            raise ValueError(
                f"LEDGER_BACKEND must be one of {', '.join(LEDGER_BACKENDS)}, got {backend!r}"
            )

        return cls(
            env=os.getenv("ENV", "development"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
            webhook_tolerance_seconds=int(os.getenv("STRIPE_WEBHOOK_TOLERANCE", "300")),
            domain_url=os.getenv("DOMAIN_URL") or "https://leadershipcompanion.co",
            ledger_backend=backend,
            google_client_email=os.getenv("GOOGLE_CLIENT_EMAIL", ""),
            # Hosting dashboards store the PEM with literal "\n" sequences
            google_private_key=os.getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n"),
            google_sheet_id=os.getenv("GOOGLE_SHEET_ID", ""),
            google_form_id=os.getenv("GOOGLE_FORM_ID", ""),
            form_field_ids={
                name: os.getenv(env_name, "")
                for name, env_name in FORM_FIELD_ENV.items()
                if os.getenv(env_name)
            },
            count_endpoint_url=os.getenv("COUNT_ENDPOINT_URL") or None,
            count_cache_ttl_seconds=float(os.getenv("COUNT_CACHE_TTL_SECONDS", "60")),
            ledger_timeout_seconds=float(os.getenv("LEDGER_TIMEOUT_SECONDS", "8")),
            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
        )

    @property
    def debug(self) -> bool:
        return self.env == "development"


_config: Optional[LandingConfig] = None


def get_config() -> LandingConfig:
    """Get or create the process-wide configuration."""
    global _config
    if _config is None:
        _config = LandingConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
