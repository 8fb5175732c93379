# storage/__init__.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — STORAGE MODULE
# ============================================================================
# Ledger backends (Google Sheets, Google Form)
# ============================================================================

from storage.google_sheets import GoogleSheetsClient
from storage.ledger import (
    LedgerSink,
    SheetsLedgerSink,
    FormLedgerSink,
    build_ledger_sink,
    get_ledger_sink,
)

__all__ = [
    "GoogleSheetsClient",
    "LedgerSink",
    "SheetsLedgerSink",
    "FormLedgerSink",
    "build_ledger_sink",
    "get_ledger_sink",
]
