"""
File sync: push a local file into every board item matching an email.

Each (board, email, filename) is uploaded at most once; the uploaded-files
ledger is the source of truth for what has been sent.
"""

import argparse
from pathlib import Path

from monday_sync.config import settings
from monday_sync.core.ledger import UploadedFilesLedger
from monday_sync.core.logging import bind_context, clear_context, configure_logging, get_logger
from monday_sync.services.monday import MondayClient

log = get_logger(__name__)


class FileSyncProcessor:
    """Upload files to the items found by email, de-duplicated by the ledger."""

    def __init__(
        self,
        client: MondayClient | None = None,
        ledger: UploadedFilesLedger | None = None,
        file_column_map: dict[int, str] | None = None,
    ):
        self.client = client or MondayClient()
        self.ledger = ledger or UploadedFilesLedger()
        self.file_column_map = (
            file_column_map if file_column_map is not None else settings.file_column_map
        )

    @property
    def board_ids(self) -> list[int]:
        return list(self.file_column_map)

    def process_file_upload(self, email: str, file_path: Path) -> dict:
        """
        Upload file_path to the mapped file column of every item with email.

        Args:
            email: Email identifying the items
            file_path: Local file to upload

        Returns:
            Stats dict with items, uploaded, skipped and errors counts

        Raises:
            MissingEmailError: if email is empty
        """
        file_path = Path(file_path)
        filename = file_path.name
        stats = {"items": 0, "uploaded": 0, "skipped": 0, "errors": 0}

        items = self.client.find_items_by_email(self.board_ids, email)
        stats["items"] = len(items)
        if not items:
            log.info("email_not_found_in_boards", email=email)
            return stats

        for item in items:
            bind_context(board_id=item.board_id, item_id=item.id)
            try:
                column_id = self.file_column_map.get(item.board_id)
                if not column_id:
                    log.warning("file_column_not_mapped")
                    stats["skipped"] += 1
                    continue

                if not self.ledger.claim(item.board_id, email, filename):
                    log.info("file_already_uploaded", file=filename, email=email)
                    stats["skipped"] += 1
                    continue

                log.info("uploading_file", file=filename)
                try:
                    result = self.client.upload_file_to_column(item.id, column_id, file_path)
                except Exception:
                    self.ledger.release(item.board_id, email, filename)
                    raise
                if result is None:
                    self.ledger.release(item.board_id, email, filename)
                    stats["errors"] += 1
                    continue

                self.ledger.record(item.board_id, email, filename)
                stats["uploaded"] += 1
                log.info("file_uploaded", file=filename)
            finally:
                clear_context()

        return stats


def main():
    """CLI entry point for uploading one local file by email."""
    parser = argparse.ArgumentParser(description="Upload a file to every board item matching an email")
    parser.add_argument("--email", required=True, help="Email of the target items")
    parser.add_argument("--file", required=True, type=Path, help="Local file to upload")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(log_level=args.log_level, json_output=settings.log_json)

    stats = FileSyncProcessor().process_file_upload(args.email, args.file)
    log.info("file_sync_summary", **stats)


if __name__ == "__main__":
    main()
