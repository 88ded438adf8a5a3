"""
Download CRM record attachments to local disk, one folder per email.
"""

import argparse
import sys
from pathlib import Path

from monday_sync.config import settings
from monday_sync.core.logging import configure_logging, get_logger
from monday_sync.core.paths import contained_path
from monday_sync.processors.base import BaseProcessor
from monday_sync.services.zoho import ZohoAuthError, ZohoClient

log = get_logger(__name__)


class AttachmentDownloadProcessor(BaseProcessor):
    """Fetch the attachments of the first `limit` records of a module."""

    def __init__(
        self,
        zoho: ZohoClient | None = None,
        module: str | None = None,
        limit: int | None = 3,
        output_dir: Path | None = None,
    ):
        self.zoho = zoho or ZohoClient()
        self.module = module or settings.zoho_records_module
        self.limit = limit
        self.output_dir = output_dir or settings.attachments_dir

    def run(self) -> dict:
        """
        Returns:
            Mapping of record email to downloaded file names, under "records"
        """
        self.zoho.get_access_token()

        downloaded: dict[str, list[str]] = {}
        count = 0
        for record in self.zoho.iter_records(self.module, fields="id,Full_Name,Name,Email"):
            if self.limit is not None and count >= self.limit:
                break
            count += 1

            names = []
            for attachment in self.zoho.list_attachments(self.module, record.id):
                destination = contained_path(
                    self.output_dir, record.email or record.id, attachment.get("File_Name") or attachment["id"]
                )
                path = self.zoho.download_attachment(self.module, record.id, attachment["id"], destination)
                if path is not None:
                    names.append(destination.name)
            downloaded[record.email or record.id] = names
            log.info("record_attachments", name=record.name, email=record.email, attachments=names)

        return {"records": downloaded}


def main():
    """CLI entry point for downloading CRM attachments."""
    parser = argparse.ArgumentParser(description="Download CRM record attachments")
    parser.add_argument("--module", default=settings.zoho_records_module, help="CRM module API name")
    parser.add_argument("--limit", type=int, default=3, help="Number of records to process (default: 3)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(log_level=args.log_level, json_output=settings.log_json)

    try:
        AttachmentDownloadProcessor(module=args.module, limit=args.limit).run()
    except ZohoAuthError as e:
        log.error("attachment_download_aborted", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
