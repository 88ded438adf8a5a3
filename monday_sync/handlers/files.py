"""
Handlers for webhook events that carry uploaded files.

Each file is downloaded from its public asset URL and re-uploaded to the
items sharing the event's email. One failing file does not stop the rest.
"""

from pathlib import Path

from monday_sync.config import settings
from monday_sync.core.logging import get_logger
from monday_sync.core.paths import contained_path
from monday_sync.core.models import AssetFile, EventType, ProcessingResult, WebhookEvent
from monday_sync.handlers.base import BaseHandler
from monday_sync.handlers.registry import register_handler
from monday_sync.processors.file_sync import FileSyncProcessor
from monday_sync.services.monday import MondayAPIError

log = get_logger(__name__)

_file_sync: FileSyncProcessor | None = None


def get_file_sync() -> FileSyncProcessor:
    """Process-wide FileSyncProcessor, so every handler shares one ledger."""
    global _file_sync
    if _file_sync is None:
        _file_sync = FileSyncProcessor()
    return _file_sync


def set_file_sync(file_sync: FileSyncProcessor | None) -> None:
    """Replace the shared FileSyncProcessor (for testing)."""
    global _file_sync
    _file_sync = file_sync


class FileEventHandler(BaseHandler):
    """Common download-and-sync flow for file-carrying events."""

    @property
    def file_sync(self) -> FileSyncProcessor:
        return get_file_sync()

    def handle(self, event: WebhookEvent) -> ProcessingResult:
        email = event.email(settings.source_email_column)
        files = event.files(settings.source_file_column)

        if not email or not files:
            log.info("email_or_files_missing", event_type=event.type, has_email=bool(email), files=len(files))
            return ProcessingResult(success=True, action="skipped", event_type=event.type)

        log.info("syncing_event_files", email=email, files=[f.name for f in files])
        totals = {"files": len(files), "uploaded": 0, "skipped": 0, "errors": 0}
        for asset in files:
            try:
                path = self._download(asset, email)
                stats = self.file_sync.process_file_upload(email, path)
            except (MondayAPIError, OSError, ValueError) as e:
                log.error("file_sync_error", asset_id=asset.asset_id, file=asset.name, error=str(e))
                totals["errors"] += 1
                continue
            totals["uploaded"] += stats["uploaded"]
            totals["skipped"] += stats["skipped"]
            totals["errors"] += stats["errors"]

        return ProcessingResult(
            success=True,
            action="files_synced",
            event_type=event.type,
            details=totals,
        )

    def _download(self, asset: AssetFile, email: str) -> Path:
        client = self.file_sync.client
        url = client.get_public_url(asset.asset_id)
        destination = contained_path(settings.download_dir, email, asset.name or asset.asset_id)
        return client.download_file(url, destination)


@register_handler
class CreatePulseHandler(FileEventHandler):
    """New item created with files in the source file column."""

    event_types = (EventType.CREATE_PULSE,)


@register_handler
class FileColumnUpdateHandler(FileEventHandler):
    """Files added to the source file column of an existing item."""

    event_types = (EventType.UPDATE_COLUMN_VALUE,)

    def can_handle(self, event: WebhookEvent) -> bool:
        return super().can_handle(event) and event.column_id == settings.source_file_column
