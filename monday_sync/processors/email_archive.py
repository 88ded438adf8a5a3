"""
Email archive processor.

Exports the CRM email history of every record of a module into a PDF and
uploads it to the board items sharing the record's email.
"""

import argparse
import sys

from monday_sync.config import settings
from monday_sync.core.logging import bind_context, clear_context, configure_logging, get_logger
from monday_sync.core.models import CrmEmail, CrmRecord
from monday_sync.core.paths import contained_path
from monday_sync.processors.base import BaseProcessor
from monday_sync.processors.file_sync import FileSyncProcessor
from monday_sync.services.monday import MissingEmailError
from monday_sync.services.pdf import clean_email_content, render_emails_pdf
from monday_sync.services.zoho import ZohoAuthError, ZohoClient

log = get_logger(__name__)


class EmailArchiveProcessor(BaseProcessor):
    """CRM email history -> PDF -> board file column."""

    def __init__(
        self,
        zoho: ZohoClient | None = None,
        file_sync: FileSyncProcessor | None = None,
        module: str | None = None,
        limit: int | None = None,
    ):
        self.zoho = zoho or ZohoClient()
        self.file_sync = file_sync or FileSyncProcessor()
        self.module = module or settings.zoho_records_module
        self.limit = limit

    def run(self) -> dict:
        """
        Archive every record of the module.

        Raises:
            ZohoAuthError: if no CRM access token can be obtained
        """
        self.zoho.get_access_token()

        stats = {"records": 0, "archived": 0, "no_emails": 0, "uploaded": 0, "errors": 0}
        for record in self.zoho.iter_records(self.module, fields="id,Name,Full_Name,Email"):
            if self.limit is not None and stats["records"] >= self.limit:
                break
            stats["records"] += 1
            bind_context(record_id=record.id)
            try:
                self._archive_record(record, stats)
            finally:
                clear_context()

        log.info("email_archive_complete", module=self.module, **stats)
        return stats

    def _collect_emails(self, record: CrmRecord) -> list[CrmEmail]:
        emails = self.zoho.get_record_emails(self.module, record.id)
        for email in emails:
            content = self.zoho.get_email_content(self.module, record.id, email.message_id)
            email.content = clean_email_content(content)
            log.debug("email_collected", subject=email.subject, sender=email.sender)
        return emails

    def _archive_record(self, record: CrmRecord, stats: dict) -> None:
        name = record.name or "Unknown Name"
        email_address = record.email or "no-email"
        log.info("processing_record", name=name, email=email_address)

        emails = self._collect_emails(record)
        if not emails:
            log.info("record_has_no_emails", email=email_address)
            stats["no_emails"] += 1
            return

        safe_name = name.replace("/", "-")
        pdf_path = contained_path(settings.archive_dir, email_address, f"emails-{safe_name}.pdf")
        render_emails_pdf(emails, pdf_path)
        stats["archived"] += 1

        try:
            upload_stats = self.file_sync.process_file_upload(record.email, pdf_path)
        except MissingEmailError:
            log.warning("record_has_no_email", name=name)
            stats["errors"] += 1
            return
        stats["uploaded"] += upload_stats["uploaded"]
        stats["errors"] += upload_stats["errors"]


def main():
    """CLI entry point for the email archive."""
    parser = argparse.ArgumentParser(description="Archive CRM email history as PDFs on monday.com")
    parser.add_argument(
        "--module",
        default=settings.zoho_records_module,
        help=f"CRM module API name (default: {settings.zoho_records_module})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of records to process (default: no limit)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(log_level=args.log_level, json_output=settings.log_json)

    try:
        EmailArchiveProcessor(module=args.module, limit=args.limit).run()
    except ZohoAuthError as e:
        log.error("email_archive_aborted", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
