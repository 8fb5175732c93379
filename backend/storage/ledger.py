# storage/ledger.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — LEDGER SINKS
# ============================================================================
# The ledger is the append-only record of signups and card captures. Two
# interchangeable backends share one contract:
#   - SheetsLedgerSink: appends a row to the signup spreadsheet
#   - FormLedgerSink:   posts the fields to a public Google Form
# ============================================================================

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from config import LandingConfig, get_config
from errors import SinkError
from schemas.landing_models import LedgerAck, LedgerRecord
from storage.google_sheets import GoogleSheetsClient, SCOPE_READ_WRITE

logger = logging.getLogger("LandingAPI.Ledger")

LEDGER_RANGE = "Sheet1!A:J"
FORM_URL_TEMPLATE = "https://docs.google.com/forms/d/e/{form_id}/formResponse"


class LedgerSink(ABC):
    """Append-only ledger backend."""

    name: str = "ledger"

    @abstractmethod
    async def append(self, record: LedgerRecord) -> LedgerAck:
        """Append one record. Raises SinkError on failure."""
        pass


class SheetsLedgerSink(LedgerSink):
    """Appends ledger rows to Sheet1 of the signup spreadsheet."""

    name = "sheets"

    def __init__(self, client: GoogleSheetsClient, range_name: str = LEDGER_RANGE):
        self.client = client
        self.range_name = range_name

    async def append(self, record: LedgerRecord) -> LedgerAck:
        try:
            updated_range = await self.client.append_row(self.range_name, record.sheet_row())
        except Exception as e:
            logger.error(f"Sheets append failed: {e}")
            raise SinkError(self.name, str(e)) from e

        return LedgerAck(backend=self.name, reference=updated_range)


class FormLedgerSink(LedgerSink):
    """
    Submits ledger records as Google Form responses.

    Field ids come from configuration; a field without an id is left out of
    the submission rather than failing the append.
    """

    name = "form"

    def __init__(
        self,
        form_id: str,
        field_ids: Dict[str, str],
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.form_id = form_id
        self.field_ids = dict(field_ids)
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def url(self) -> str:
        return FORM_URL_TEMPLATE.format(form_id=self.form_id)

    def encode(self, record: LedgerRecord) -> Dict[str, str]:
        """Map logical field names onto the configured entry ids."""
        data = {}
        for name, value in record.form_values().items():
            field_id = self.field_ids.get(name)
            if field_id:
                data[field_id] = value or ""
        return data

    async def append(self, record: LedgerRecord) -> LedgerAck:
        if not self.form_id:
            raise SinkError(self.name, "GOOGLE_FORM_ID not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(self.url, data=self.encode(record))
        except httpx.HTTPError as e:
            logger.error(f"Form submission failed: {e}")
            raise SinkError(self.name, str(e)) from e

        if response.is_error:
            logger.error(f"Form submission rejected: HTTP {response.status_code}")
            raise SinkError(self.name, f"HTTP {response.status_code}")

        return LedgerAck(backend=self.name, reference=str(response.status_code))


def build_ledger_sink(config: LandingConfig) -> LedgerSink:
    """Create the ledger backend selected by LEDGER_BACKEND."""
    if config.ledger_backend == "form":
        return FormLedgerSink(
            form_id=config.google_form_id,
            field_ids=config.form_field_ids,
            timeout_seconds=config.http_timeout_seconds,
        )

    client = GoogleSheetsClient(
        spreadsheet_id=config.google_sheet_id,
        client_email=config.google_client_email,
        private_key=config.google_private_key,
        scopes=(SCOPE_READ_WRITE,),
    )
    return SheetsLedgerSink(client)


# Singleton instance
_sink_instance: Optional[LedgerSink] = None


def get_ledger_sink() -> LedgerSink:
    """Get or create the process-wide ledger sink."""
    global _sink_instance
    if _sink_instance is None:
        _sink_instance = build_ledger_sink(get_config())
    return _sink_instance
