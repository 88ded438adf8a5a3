"""Unit tests for FileSyncProcessor (upload de-duplication)."""

import threading
import time

import pytest

from monday_sync.core.ledger import UploadedFilesLedger
from monday_sync.core.models import BoardItem
from monday_sync.processors.file_sync import FileSyncProcessor
from monday_sync.services.monday import MissingEmailError


@pytest.fixture
def processor(mock_monday, ledger) -> FileSyncProcessor:
    return FileSyncProcessor(
        client=mock_monday,
        ledger=ledger,
        file_column_map={111: "archivo3__1", 222: "archivo51__1"},
    )


class TestProcessFileUpload:
    """Tests for process_file_upload."""

    def test_uploads_and_records(self, processor, mock_monday, ledger, sample_file):
        stats = processor.process_file_upload("a@b.com", sample_file)

        mock_monday.find_items_by_email.assert_called_once_with([111, 222], "a@b.com")
        mock_monday.upload_file_to_column.assert_called_once_with("9001", "archivo3__1", sample_file)
        assert ledger.contains(111, "a@b.com", "report.pdf")
        assert stats == {"items": 1, "uploaded": 1, "skipped": 0, "errors": 0}

    def test_second_upload_is_skipped(self, processor, mock_monday, sample_file):
        """Test the same file is uploaded to a record at most once."""
        processor.process_file_upload("a@b.com", sample_file)
        stats = processor.process_file_upload("a@b.com", sample_file)

        assert mock_monday.upload_file_to_column.call_count == 1
        assert stats["skipped"] == 1
        assert stats["uploaded"] == 0

    def test_skip_survives_restart(self, mock_monday, ledger, sample_file):
        """Test a fresh processor reloads the ledger from disk."""
        ledger.record(111, "a@b.com", "report.pdf")
        processor = FileSyncProcessor(
            client=mock_monday,
            ledger=UploadedFilesLedger(ledger.path),
            file_column_map={111: "archivo3__1"},
        )

        processor.process_file_upload("a@b.com", sample_file)
        mock_monday.upload_file_to_column.assert_not_called()

    def test_same_file_other_board_is_uploaded(self, processor, mock_monday, ledger, sample_file):
        ledger.record(111, "a@b.com", "report.pdf")
        mock_monday.find_items_by_email.return_value = [
            BoardItem(111, "9001"),
            BoardItem(222, "9002"),
        ]

        stats = processor.process_file_upload("a@b.com", sample_file)

        mock_monday.upload_file_to_column.assert_called_once_with("9002", "archivo51__1", sample_file)
        assert stats["uploaded"] == 1
        assert stats["skipped"] == 1

    def test_unmapped_board_is_skipped(self, processor, mock_monday, sample_file):
        mock_monday.find_items_by_email.return_value = [BoardItem(999, "1")]

        stats = processor.process_file_upload("a@b.com", sample_file)

        mock_monday.upload_file_to_column.assert_not_called()
        assert stats["skipped"] == 1

    def test_failed_upload_is_not_recorded(self, processor, mock_monday, ledger, sample_file):
        """Test a failed upload can be retried later."""
        mock_monday.upload_file_to_column.return_value = None

        stats = processor.process_file_upload("a@b.com", sample_file)

        assert stats["errors"] == 1
        assert not ledger.contains(111, "a@b.com", "report.pdf")

    def test_no_items(self, processor, mock_monday, sample_file):
        mock_monday.find_items_by_email.return_value = []

        stats = processor.process_file_upload("a@b.com", sample_file)

        assert stats == {"items": 0, "uploaded": 0, "skipped": 0, "errors": 0}
        mock_monday.upload_file_to_column.assert_not_called()

    def test_missing_email_propagates(self, processor, mock_monday, sample_file):
        mock_monday.find_items_by_email.side_effect = MissingEmailError("Email is undefined")

        with pytest.raises(MissingEmailError):
            processor.process_file_upload("", sample_file)

    def test_failed_upload_can_be_retried(self, processor, mock_monday, ledger, sample_file):
        mock_monday.upload_file_to_column.return_value = None
        processor.process_file_upload("a@b.com", sample_file)

        mock_monday.upload_file_to_column.return_value = {"data": {"add_file_to_column": {"id": "1"}}}
        stats = processor.process_file_upload("a@b.com", sample_file)

        assert stats["uploaded"] == 1
        assert ledger.contains(111, "a@b.com", "report.pdf")

    def test_upload_exception_releases_claim(self, processor, mock_monday, ledger, sample_file):
        mock_monday.upload_file_to_column.side_effect = RuntimeError("socket closed")
        with pytest.raises(RuntimeError):
            processor.process_file_upload("a@b.com", sample_file)

        assert ledger.claim(111, "a@b.com", "report.pdf")


class TestConcurrentUploads:
    """Tests for webhook deliveries of the same file racing each other."""

    def test_same_file_uploaded_once(self, processor, mock_monday, sample_file):
        def slow_upload(item_id, column_id, path):
            time.sleep(0.2)
            return {"data": {"add_file_to_column": {"id": "1"}}}

        mock_monday.upload_file_to_column.side_effect = slow_upload
        results = []

        def deliver():
            results.append(processor.process_file_upload("a@b.com", sample_file))

        threads = [threading.Thread(target=deliver) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert mock_monday.upload_file_to_column.call_count == 1
        assert sorted(r["uploaded"] for r in results) == [0, 1]
        assert sorted(r["skipped"] for r in results) == [0, 1]
