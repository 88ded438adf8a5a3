"""
Uploaded-files ledger.

Tracks which files were already uploaded for an email on a board, so the
same file is never pushed twice to the same item. Persisted as JSON:

    {"<board_id>": {"<email>": ["file-a.pdf", "file-b.pdf"]}}
"""

import json
import os
import threading
from pathlib import Path

from monday_sync.config import settings
from monday_sync.core.logging import get_logger

log = get_logger(__name__)


def _is_ledger_shape(data) -> bool:
    """board -> email -> list of filenames, all keys and names strings."""
    if not isinstance(data, dict):
        return False
    for emails in data.values():
        if not isinstance(emails, dict):
            return False
        for files in emails.values():
            if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
                return False
    return True


class UploadedFilesLedger:
    """JSON-backed record of uploads per board and email."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or settings.ledger_path)
        self._lock = threading.Lock()
        # Uploads in progress, claimed but not yet recorded
        self._pending: set[tuple[str, str, str]] = set()
        self._entries: dict[str, dict[str, list[str]]] = self._load()

    def _load(self) -> dict[str, dict[str, list[str]]]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw or "{}")
        except (OSError, json.JSONDecodeError) as e:
            log.error("ledger_load_error", path=str(self.path), error=str(e))
            return {}
        if not _is_ledger_shape(data):
            log.error("ledger_load_error", path=str(self.path), error="unexpected ledger layout")
            return {}
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._entries, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def contains(self, board_id: int | str, email: str, filename: str) -> bool:
        """Check whether filename was already uploaded for email on board."""
        with self._lock:
            return filename in self._entries.get(str(board_id), {}).get(email, [])

    def claim(self, board_id: int | str, email: str, filename: str) -> bool:
        """
        Reserve an upload of filename for email on board.

        Returns False when the file is already recorded or another caller
        holds the claim. A successful claim must be followed by record()
        or release().
        """
        key = (str(board_id), email, filename)
        with self._lock:
            if key in self._pending or filename in self._entries.get(key[0], {}).get(email, []):
                return False
            self._pending.add(key)
            return True

    def release(self, board_id: int | str, email: str, filename: str) -> None:
        """Drop a claim without recording, so the upload can be retried."""
        with self._lock:
            self._pending.discard((str(board_id), email, filename))

    def record(self, board_id: int | str, email: str, filename: str) -> None:
        """Append filename for email on board and persist the ledger."""
        with self._lock:
            self._pending.discard((str(board_id), email, filename))
            files = self._entries.setdefault(str(board_id), {}).setdefault(email, [])
            if filename not in files:
                files.append(filename)
            self._save()

    def files_for(self, board_id: int | str, email: str) -> list[str]:
        """Filenames already uploaded for email on board, in upload order."""
        with self._lock:
            return list(self._entries.get(str(board_id), {}).get(email, []))

    def as_dict(self) -> dict[str, dict[str, list[str]]]:
        with self._lock:
            return json.loads(json.dumps(self._entries))
