import asyncio
import json

import pytest
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpMockSequence

from storage.google_sheets import GoogleSheetsClient


def _client(*responses):
    """Client whose Sheets service replays the given (status, body) pairs."""
    http = HttpMockSequence([({"status": str(status)}, json.dumps(body)) for status, body in responses])
    client = GoogleSheetsClient("sheet-123", "svc@project.iam.gserviceaccount.com", "key")
    client._service = build("sheets", "v4", http=http, cache_discovery=False)
    return client


def test_append_row_returns_updated_range():
    client = _client((200, {
        "spreadsheetId": "sheet-123",
        "updates": {"updatedRange": "Sheet1!A7:J7", "updatedRows": 1},
    }))

    updated = asyncio.run(client.append_row("Sheet1!A:J", ["2026-10-02T12:00:00.000Z", "v@example.com"]))

    assert updated == "Sheet1!A7:J7"


def test_append_row_without_updates_returns_none():
    client = _client((200, {"spreadsheetId": "sheet-123"}))

    assert asyncio.run(client.append_row("Sheet1!A:J", ["x"])) is None


def test_count_rows_counts_returned_values():
    client = _client((200, {
        "range": "Sheet1!A1:A3",
        "majorDimension": "ROWS",
        "values": [["Timestamp"], ["2026-10-01T09:30:00.000Z"], ["2026-10-02T12:00:00.000Z"]],
    }))

    assert asyncio.run(client.count_rows("Sheet1!A:A")) == 3


def test_count_rows_on_empty_sheet_is_zero():
    # The API omits "values" entirely when the range is blank
    client = _client((200, {"range": "Sheet1!A1:A1000", "majorDimension": "ROWS"}))

    assert asyncio.run(client.count_rows("Sheet1!A:A")) == 0


def test_api_errors_propagate():
    client = _client((403, {"error": {"code": 403, "message": "The caller does not have permission"}}))

    with pytest.raises(HttpError):
        asyncio.run(client.append_row("Sheet1!A:J", ["x"]))


def test_unconfigured_client_refuses_to_build():
    client = GoogleSheetsClient("", "", "")

    assert client.configured is False
    with pytest.raises(RuntimeError):
        asyncio.run(client.count_rows("Sheet1!A:A"))
