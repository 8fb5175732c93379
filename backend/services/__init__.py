# services/__init__.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — SERVICES MODULE
# ============================================================================
# Signup count cache and signup submissions
# ============================================================================

from services.count_cache import (
    CountCache,
    CountSource,
    SheetRowCountSource,
    EndpointCountSource,
    get_count_cache,
)

from services.signups import (
    submit_signup,
    build_signup_record,
    is_valid_email,
)

__all__ = [
    # Count cache
    "CountCache",
    "CountSource",
    "SheetRowCountSource",
    "EndpointCountSource",
    "get_count_cache",
    # Signups
    "submit_signup",
    "build_signup_record",
    "is_valid_email",
]
