# storage/google_sheets.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — GOOGLE SHEETS CLIENT
# ============================================================================
# Thin async wrapper over the Sheets v4 API using service-account
# credentials. The discovery client is blocking, so every call runs in the
# default executor.
# ============================================================================

import asyncio
import logging
from typing import Any, List, Optional, Sequence

logger = logging.getLogger("LandingAPI.Sheets")

SCOPE_READ_WRITE = "https://www.googleapis.com/auth/spreadsheets"
SCOPE_READ_ONLY = "https://www.googleapis.com/auth/spreadsheets.readonly"

TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleSheetsClient:
    """
    Google Sheets access for the ledger.

    Handles:
    - Building service-account credentials from environment values
    - Appending rows to a fixed range
    - Counting populated rows in a column
    """

    def __init__(
        self,
        spreadsheet_id: str,
        client_email: str,
        private_key: str,
        scopes: Sequence[str] = (SCOPE_READ_WRITE,),
    ):
        self.spreadsheet_id = spreadsheet_id
        self.client_email = client_email
        self.private_key = private_key
        self.scopes = list(scopes)
        self._service: Any = None

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id and self.client_email and self.private_key)

    def _get_service(self):
        if self._service is not None:
            return self._service

        if not self.configured:
            raise RuntimeError("Google Sheets credentials or spreadsheet id not configured")

        from google.oauth2 import service_account
        from googleapiclient.discovery import build

        credentials = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": self.client_email,
                "private_key": self.private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=self.scopes,
        )
        self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        logger.info(f"Sheets client built for {self.client_email} ({', '.join(self.scopes)})")
        return self._service

    async def append_row(self, range_name: str, values: List[str]) -> Optional[str]:
        """
        Append a single row.

        Returns:
            The range the API reports as updated, if any.
        """
        def append():
            return self._get_service().spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                body={"values": [values]},
            ).execute()

        result = await asyncio.get_running_loop().run_in_executor(None, append)
        updated_range = (result or {}).get("updates", {}).get("updatedRange")
        logger.debug(f"Appended row to {updated_range or range_name}")
        return updated_range

    async def count_rows(self, range_name: str) -> int:
        """Number of populated rows in the range, header included."""
        def get_values():
            return self._get_service().spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
            ).execute()

        result = await asyncio.get_running_loop().run_in_executor(None, get_values)
        rows = (result or {}).get("values") or []
        return len(rows)
