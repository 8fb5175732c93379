"""
Capture Pipeline
================
Turns a signed Stripe notification into at most one ledger row.

    RECEIVED -> VERIFYING -> REJECTED                              (400)
                          -> VERIFIED -> CLASSIFYING -> IGNORED     (200)
                                                     -> MATCHED -> LOGGING -> ACKNOWLEDGED (200)

Stripe only needs to hear that the signature was valid and the event was
understood. A failed ledger write is logged and dropped: the card is
already saved on Stripe's side, and a non-200 would only trigger redelivery.
Repeated deliveries of one event may therefore add duplicate rows.
"""

import asyncio
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

import structlog
from pydantic import BaseModel, Field

from config import get_config
from errors import VerificationError
from pipeline.classifier import classify
from pipeline.signature import SignatureVerifier
from schemas.landing_models import CaptureIntent, LedgerAck, VerifiedEvent
from storage.ledger import LedgerSink, get_ledger_sink

DEFAULT_LEDGER_TIMEOUT_SECONDS = 8.0

Classifier = Callable[[VerifiedEvent], Optional[CaptureIntent]]


class PipelineState(str, Enum):
    RECEIVED = "received"
    VERIFYING = "verifying"
    REJECTED = "rejected"
    VERIFIED = "verified"
    CLASSIFYING = "classifying"
    IGNORED = "ignored"
    MATCHED = "matched"
    LOGGING = "logging"
    ACKNOWLEDGED = "acknowledged"


class PipelineOutcome(BaseModel):
    """Terminal state of one notification plus the HTTP reply for it."""
    state: PipelineState
    status_code: int
    body: Dict[str, Any]
    event_type: Optional[str] = None
    classification: Optional[PipelineState] = None
    ledger_attempted: bool = False
    ledger_ok: Optional[bool] = None
    correlation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


ACK_BODY = {"received": True}


class CapturePipeline:
    """
    Verifier -> classifier -> ledger sink, with the acknowledgment policy.

    Example:
        pipeline = CapturePipeline(SignatureVerifier(secret), sink)
        outcome = await pipeline.process(raw_body, request.headers.get("stripe-signature"))
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        sink: LedgerSink,
        classifier: Classifier = classify,
        ledger_timeout_seconds: float = DEFAULT_LEDGER_TIMEOUT_SECONDS,
    ):
        self.verifier = verifier
        self.sink = sink
        self.classifier = classifier
        self.ledger_timeout_seconds = ledger_timeout_seconds
        self._base_logger = structlog.get_logger()

    def _get_logger(self, correlation_id: str):
        return self._base_logger.bind(component="capture_pipeline", correlation_id=correlation_id)

    async def process(self, raw_body: Union[bytes, str], signature_header: Optional[str]) -> PipelineOutcome:
        correlation_id = str(uuid.uuid4())
        log = self._get_logger(correlation_id)

        try:
            event = self.verifier.verify(raw_body, signature_header)
        except VerificationError as e:
            log.warning("webhook_rejected", reason=e.reason)
            return PipelineOutcome(
                state=PipelineState.REJECTED,
                status_code=e.status_code,
                body={"error": e.message},
                correlation_id=correlation_id,
            )

        log = log.bind(event_type=event.event_type, stripe_event_id=event.event_id)
        log.info("webhook_received", state=PipelineState.VERIFIED.value)

        try:
            intent = self.classifier(event)
        except Exception as e:
            # Signed but unreadable: redelivery would fail the same way
            log.error("webhook_classify_failed", error=str(e), error_type=type(e).__name__)
            intent = None

        if intent is None:
            log.info("webhook_ignored", state=PipelineState.IGNORED.value)
            return PipelineOutcome(
                state=PipelineState.ACKNOWLEDGED,
                status_code=200,
                body=dict(ACK_BODY),
                event_type=event.event_type,
                classification=PipelineState.IGNORED,
                correlation_id=correlation_id,
            )

        ack = await self._append_best_effort(intent, log)

        log.info("webhook_acknowledged", state=PipelineState.ACKNOWLEDGED.value, ledger_ok=ack is not None)
        return PipelineOutcome(
            state=PipelineState.ACKNOWLEDGED,
            status_code=200,
            body=dict(ACK_BODY),
            event_type=event.event_type,
            classification=PipelineState.MATCHED,
            ledger_attempted=True,
            ledger_ok=ack is not None,
            correlation_id=correlation_id,
        )

    async def _append_best_effort(self, intent: CaptureIntent, log) -> Optional[LedgerAck]:
        """
        One ledger append, bounded by the timeout and never retried.

        Returns the ack, or None when the write failed. Failures are logged
        here and go no further.
        """
        record = intent.to_record()
        try:
            ack = await asyncio.wait_for(self.sink.append(record), timeout=self.ledger_timeout_seconds)
        except asyncio.TimeoutError:
            log.error("ledger_append_timeout", backend=self.sink.name, timeout_seconds=self.ledger_timeout_seconds)
            return None
        except Exception as e:
            log.error("ledger_append_failed", backend=self.sink.name, error=str(e), error_type=type(e).__name__)
            return None

        log.info(
            "founding_member_logged",
            backend=ack.backend,
            email=record.email,
            tier=record.tier_label,
        )
        return ack


# Singleton instance
_pipeline_instance: Optional[CapturePipeline] = None


def get_capture_pipeline() -> CapturePipeline:
    """Get or create the process-wide capture pipeline."""
    global _pipeline_instance
    if _pipeline_instance is None:
        config = get_config()
        _pipeline_instance = CapturePipeline(
            verifier=SignatureVerifier(config.stripe_webhook_secret, config.webhook_tolerance_seconds),
            sink=get_ledger_sink(),
            ledger_timeout_seconds=config.ledger_timeout_seconds,
        )
    return _pipeline_instance
