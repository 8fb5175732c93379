import asyncio
import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, List, Optional

import pytest

WEBHOOK_SECRET = "whsec_test_secret"

# Must be in place before api.server reads the environment
os.environ.setdefault("ENV", "test")
os.environ["STRIPE_WEBHOOK_SECRET"] = WEBHOOK_SECRET
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["LEDGER_BACKEND"] = "sheets"

from errors import SinkError  # noqa: E402
from schemas.landing_models import LedgerAck, LedgerRecord  # noqa: E402
from services.count_cache import CountSource  # noqa: E402
from storage.ledger import LedgerSink  # noqa: E402


class RecordingSink(LedgerSink):
    """Ledger sink that keeps every append attempt in memory."""

    name = "recording"

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0):
        self.error = error
        self.delay = delay
        self.attempts: List[LedgerRecord] = []

    async def append(self, record: LedgerRecord) -> LedgerAck:
        self.attempts.append(record)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LedgerAck(backend=self.name, reference=f"row-{len(self.attempts)}")


class FakeCountSource(CountSource):
    def __init__(self, values=None, error: Optional[Exception] = None):
        self.values = list(values or [])
        self.error = error
        self.calls = 0

    async def fetch_count(self) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.values.pop(0)


class FakeClock:
    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Stripe-Signature header value for payload, computed the way Stripe does."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed_event(mode: str = "setup", **session_overrides: Any) -> Dict[str, Any]:
    session = {
        "id": "cs_test_a1b2c3",
        "object": "checkout.session",
        "mode": mode,
        "customer": "cus_Q1w2e3r4",
        "customer_email": "founder@example.com",
        "customer_details": {"email": "details@example.com"},
        "setup_intent": "seti_9z8y7x",
        "metadata": {
            "tier": "starter",
            "utm_source": "linkedin",
            "utm_medium": "social",
            "utm_campaign": "founding",
            "utm_content": "",
            "signup_timestamp": "2026-10-01T09:30:00.000Z",
        },
    }
    session.update(session_overrides)
    return {
        "id": "evt_test_123",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": session},
    }


@pytest.fixture
def webhook_secret() -> str:
    return WEBHOOK_SECRET


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    return RecordingSink(error=SinkError("sheets", "quota exceeded"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signed():
    """Build (raw_body, signature_header) for an event dict."""
    def _signed(event: Dict[str, Any], secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None):
        payload = json.dumps(event)
        return payload.encode("utf-8"), sign_payload(payload, secret, timestamp)
    return _signed
