# errors.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — ERROR TAXONOMY
# ============================================================================
# Every error carries the HTTP status it maps to. The server renders any
# LandingError as {"error": message}.
# ============================================================================

from typing import Dict, Iterable, Optional


class LandingError(Exception):
    """Base error for the landing handlers."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(LandingError):
    """Malformed client input. The message is echoed to the client."""
    status_code = 400


class MethodNotAllowed(LandingError):
    status_code = 405

    def __init__(self, allow: Iterable[str], message: str = "Method not allowed"):
        super().__init__(message)
        self.allow = sorted(allow)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"Allow": ", ".join(self.allow)}


class VerificationError(LandingError):
    """Untrusted or forged notification. Never processed further."""
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(f"Webhook Error: {reason}")
        self.reason = reason


class UpstreamServiceError(LandingError):
    """Stripe or the record store failed."""
    status_code = 500


class SinkError(UpstreamServiceError):
    """A ledger backend rejected or failed an append."""

    def __init__(self, backend: str, message: str):
        super().__init__(f"{backend} ledger append failed: {message}")
        self.backend = backend
