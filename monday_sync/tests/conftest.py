"""
Shared pytest fixtures for monday_sync tests.
"""

import pytest
import requests
from unittest.mock import MagicMock

from monday_sync.config import settings
from monday_sync.core.ledger import UploadedFilesLedger
from monday_sync.core.models import BoardItem


def _make_response(json_data=None, status_code: int = 200) -> MagicMock:
    """Fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data if json_data is not None else {}
    response.content = b""
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"HTTP {status_code}", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


def _items_page(items: list[tuple[str, str]], cursor: str | None = None) -> dict:
    """GraphQL body for one items_page_by_column_values page."""
    return {
        "data": {
            "items_page_by_column_values": {
                "cursor": cursor,
                "items": [
                    {"id": item_id, "name": f"Item {item_id}", "column_values": [{"text": text}]}
                    for item_id, text in items
                ],
            }
        }
    }


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def items_page():
    return _items_page


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Keep every JSON state file and download inside tmp_path."""
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    return tmp_path


@pytest.fixture
def ledger(tmp_path) -> UploadedFilesLedger:
    return UploadedFilesLedger(tmp_path / "uploaded-files.json")


@pytest.fixture
def mock_monday():
    """Mock MondayClient for testing without HTTP."""
    client = MagicMock()
    client.find_items_by_email.return_value = [BoardItem(board_id=111, id="9001")]
    client.upload_file_to_column.return_value = {"data": {"add_file_to_column": {"id": "1"}}}
    return client


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4 test")
    return path


@pytest.fixture
def create_pulse_payload() -> dict:
    """Webhook body for an item created with two files."""
    return {
        "event": {
            "type": "create_pulse",
            "boardId": 1525879275,
            "pulseId": 42,
            "columnValues": {
                "e_mail__1": {"email": "jane.doe@example.com", "text": "jane.doe@example.com"},
                "upload_file__1": {
                    "files": [
                        {"assetId": 501, "name": "blood-test.pdf"},
                        {"assetId": 502, "name": "consent.pdf"},
                    ]
                },
            },
        }
    }


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock settings for testing."""
    monkeypatch.setenv("MONDAY_API_KEY", "test-monday-key")
    monkeypatch.setenv("ZOHO_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("ZOHO_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("ZOHO_REFRESH_TOKEN", "test-refresh-token")
