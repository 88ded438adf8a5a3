"""Batch processors."""

from .base import BaseProcessor
from .file_sync import FileSyncProcessor
from .email_archive import EmailArchiveProcessor
from .lead_migration import LeadMigrationProcessor
from .attachment_download import AttachmentDownloadProcessor
from .column_cleanup import ColumnCleanupProcessor

__all__ = [
    "BaseProcessor",
    "FileSyncProcessor",
    "EmailArchiveProcessor",
    "LeadMigrationProcessor",
    "AttachmentDownloadProcessor",
    "ColumnCleanupProcessor",
]
