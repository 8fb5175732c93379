# Capture Pipeline
# ================
# Stripe card-capture webhook: signature check, classification, ledger write.
# Also hosts the setup-mode checkout that starts the flow.

from .signature import SignatureVerifier, verify
from .classifier import classify
from .capture_pipeline import (
    CapturePipeline,
    PipelineOutcome,
    PipelineState,
    get_capture_pipeline,
)
from .checkout import CheckoutService, get_checkout_service

__all__ = [
    "SignatureVerifier",
    "verify",
    "classify",
    "CapturePipeline",
    "PipelineOutcome",
    "PipelineState",
    "get_capture_pipeline",
    "CheckoutService",
    "get_checkout_service",
]
