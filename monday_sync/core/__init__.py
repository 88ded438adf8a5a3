"""Core modules for board sync."""

from .logging import configure_logging, get_logger
from .models import (
    AssetFile,
    BoardItem,
    Checkpoint,
    CrmEmail,
    CrmRecord,
    EventType,
    ProcessingResult,
    WebhookEvent,
)
from .ledger import UploadedFilesLedger
from .checkpoint import CheckpointStore

__all__ = [
    "configure_logging",
    "get_logger",
    "AssetFile",
    "BoardItem",
    "Checkpoint",
    "CrmEmail",
    "CrmRecord",
    "EventType",
    "ProcessingResult",
    "WebhookEvent",
    "UploadedFilesLedger",
    "CheckpointStore",
]
