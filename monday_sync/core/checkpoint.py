"""
Progress checkpoint for long CRM batches.
"""

import json
from pathlib import Path

from monday_sync.config import settings
from monday_sync.core.logging import get_logger
from monday_sync.core.models import Checkpoint

log = get_logger(__name__)


class CheckpointStore:
    """Last-write-wins JSON checkpoint."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or settings.checkpoint_path)

    def load(self) -> Checkpoint | None:
        """Return the saved checkpoint, or None when there is none."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            log.error("checkpoint_load_error", path=str(self.path), error=str(e))
            return None
        checkpoint = Checkpoint.from_dict(data)
        if not checkpoint.last_lead_id:
            return None
        return checkpoint

    def save(self, checkpoint: Checkpoint) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(checkpoint.to_dict(), indent=2), encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            log.info("checkpoint_cleared", path=str(self.path))
