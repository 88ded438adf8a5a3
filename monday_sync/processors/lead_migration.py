"""
Lead migration processor.

Copies owner and notes of every CRM lead onto the board items that carry
the lead's email. Progress is checkpointed after each lead so an
interrupted run can resume where it stopped.
"""

import argparse
import sys

import requests

from monday_sync.config import settings
from monday_sync.core.checkpoint import CheckpointStore
from monday_sync.core.logging import bind_context, clear_context, configure_logging, get_logger
from monday_sync.core.models import BoardItem, Checkpoint, CrmRecord
from monday_sync.processors.base import BaseProcessor
from monday_sync.services.monday import MondayClient
from monday_sync.services.zoho import ZohoAuthError, ZohoClient

log = get_logger(__name__)

LEAD_FIELDS = "Full_Name,id,Owner,Email,Phone,Mobile,Lead_Status,Notes"


class LeadMigrationProcessor(BaseProcessor):
    """CRM leads -> owner/notes columns of matching board items."""

    def __init__(
        self,
        zoho: ZohoClient | None = None,
        monday: MondayClient | None = None,
        checkpoints: CheckpointStore | None = None,
        email_column_map: dict[int, str] | None = None,
        owner_column_map: dict[int, str] | None = None,
        text_column_map: dict[int, str] | None = None,
        notes_column_map: dict[int, str] | None = None,
        module: str = "Leads",
    ):
        self.email_column_map = email_column_map or settings.lead_email_column_map
        self.owner_column_map = owner_column_map or settings.lead_owner_column_map
        self.text_column_map = text_column_map or settings.lead_text_column_map
        self.notes_column_map = notes_column_map or settings.lead_notes_column_map
        self.zoho = zoho or ZohoClient()
        self.monday = monday or MondayClient(email_column_map=self.email_column_map)
        self.checkpoints = checkpoints or CheckpointStore()
        self.module = module
        self._user_ids: dict[str, str] | None = None

    def run(self) -> dict:
        """
        Migrate all leads, skipping those before the saved checkpoint.

        Raises:
            ZohoAuthError: if no CRM access token can be obtained
        """
        self.zoho.get_access_token()

        leads = list(self.zoho.iter_records(self.module, fields=LEAD_FIELDS))
        stats = {"leads": len(leads), "resumed_from": None, "no_email": 0,
                 "not_found": 0, "updated": 0, "errors": 0}
        if not leads:
            log.info("no_leads_fetched")
            return stats

        start = self._resume_index(leads)
        if start:
            stats["resumed_from"] = leads[start - 1].id
            log.info("resuming_from_checkpoint", skipped=start)

        board_ids = list(self.email_column_map)
        for counter, lead in enumerate(leads[start:], start=start + 1):
            bind_context(lead_id=lead.id)
            try:
                log.info("processing_lead", counter=counter, name=lead.name)
                if not lead.email:
                    log.info("lead_has_no_email", name=lead.name)
                    stats["no_email"] += 1
                else:
                    items = self.monday.find_items_by_email(board_ids, lead.email)
                    if not items:
                        log.info("no_matching_items", email=lead.email)
                        stats["not_found"] += 1
                    for item in items:
                        if self.update_item(item, lead):
                            stats["updated"] += 1
                        else:
                            stats["errors"] += 1
                self.checkpoints.save(Checkpoint(last_lead_email=lead.email, last_lead_id=lead.id))
            finally:
                clear_context()

        log.info("lead_migration_complete", **stats)
        return stats

    def _resume_index(self, leads: list[CrmRecord]) -> int:
        checkpoint = self.checkpoints.load()
        if checkpoint is None:
            return 0
        for index, lead in enumerate(leads):
            if lead.id == checkpoint.last_lead_id:
                return index + 1
        log.warning("checkpoint_lead_not_found", lead_id=checkpoint.last_lead_id)
        return 0

    def owner_id(self, owner_name: str) -> str | None:
        """monday.com user id for a CRM owner name; users are fetched once per processor."""
        if not owner_name:
            return None
        if self._user_ids is None:
            self._user_ids = self.monday.get_user_ids()
        owner_id = self._user_ids.get(owner_name.lower())
        if owner_id is None:
            log.info("user_not_found", name=owner_name)
        return owner_id

    def build_column_values(self, board_id: int, owner_name: str, notes: str, owner_id: str | None) -> dict:
        """Column values payload for one board."""
        values = {
            self.text_column_map[board_id]: owner_name or "",
            self.notes_column_map[board_id]: {"text": notes or ""},
        }
        if owner_id:
            values[self.owner_column_map[board_id]] = {
                "personsAndTeams": [{"id": int(owner_id), "kind": "person"}]
            }
        return values

    def update_item(self, item: BoardItem, lead: CrmRecord) -> bool:
        """
        Write owner and notes onto an item.

        When the people column rejects the owner, the update is retried
        once without it.
        """
        owner_id = self.owner_id(lead.owner_name)
        values = self.build_column_values(item.board_id, lead.owner_name, lead.notes, owner_id)

        try:
            result = self.monday.change_column_values(item.board_id, item.id, values)
        except requests.RequestException as e:
            log.error("update_columns_error", item_id=item.id, error=str(e))
            return False

        errors = result.get("errors") or []
        if not errors:
            log.info("columns_updated", item_id=item.id, board_id=item.board_id)
            return True

        log.error("update_columns_graphql_errors", item_id=item.id, errors=errors)
        if not owner_id or not any("ColumnValueException" in str(e.get("message", "")) for e in errors):
            return False

        log.info("retrying_without_person", item_id=item.id, owner_id=owner_id)
        values.pop(self.owner_column_map[item.board_id], None)
        try:
            retry = self.monday.change_column_values(item.board_id, item.id, values)
        except requests.RequestException as e:
            log.error("update_columns_retry_error", item_id=item.id, error=str(e))
            return False
        if retry.get("errors"):
            log.error("update_columns_retry_graphql_errors", item_id=item.id, errors=retry["errors"])
            return False
        log.info("columns_updated_without_person", item_id=item.id, board_id=item.board_id)
        return True


def main():
    """CLI entry point for the lead migration."""
    parser = argparse.ArgumentParser(description="Migrate CRM lead owner and notes to monday.com")
    parser.add_argument(
        "--restart",
        action="store_true",
        help="Ignore the saved checkpoint and start from the first lead",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(log_level=args.log_level, json_output=settings.log_json)

    processor = LeadMigrationProcessor()
    if args.restart:
        processor.checkpoints.clear()

    try:
        processor.run()
    except ZohoAuthError as e:
        log.error("lead_migration_aborted", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
