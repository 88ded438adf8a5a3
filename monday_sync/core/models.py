"""
Data models for board sync.

Uses dataclasses for clean, typed data structures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """monday.com webhook event types handled here."""

    CREATE_PULSE = "create_pulse"
    UPDATE_COLUMN_VALUE = "update_column_value"


@dataclass
class AssetFile:
    """A file reference inside a file column value."""

    asset_id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssetFile":
        return cls(asset_id=str(data.get("assetId", "")), name=data.get("name", ""))


@dataclass
class WebhookEvent:
    """Webhook event payload as sent by monday.com."""

    type: str = ""
    board_id: int | None = None
    pulse_id: int | None = None
    column_id: str | None = None
    value: dict[str, Any] = field(default_factory=dict)
    column_values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookEvent":
        """Create WebhookEvent from the `event` object of a webhook body."""
        return cls(
            type=data.get("type", ""),
            board_id=data.get("boardId"),
            pulse_id=data.get("pulseId"),
            column_id=data.get("columnId"),
            value=data.get("value") or {},
            column_values=data.get("columnValues") or {},
        )

    def email(self, column_id: str) -> str | None:
        """Email stored in the given email column, if any."""
        column = self.column_values.get(column_id) or {}
        return column.get("email") or column.get("text") or None

    def files(self, column_id: str) -> list[AssetFile]:
        """Files of the given file column.

        Column updates carry the new files in `value`; item creation carries
        them in `columnValues`.
        """
        if self.type == EventType.UPDATE_COLUMN_VALUE and self.column_id == column_id:
            raw = self.value.get("files") or []
        else:
            raw = (self.column_values.get(column_id) or {}).get("files") or []
        return [AssetFile.from_dict(f) for f in raw]


@dataclass(frozen=True)
class BoardItem:
    """An item found on a board."""

    board_id: int
    id: str


@dataclass
class CrmRecord:
    """A Zoho CRM record (patient, contact, lead)."""

    id: str
    name: str = ""
    email: str = ""
    owner_name: str = ""
    notes: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrmRecord":
        owner = data.get("Owner") or {}
        return cls(
            id=str(data.get("id", "")),
            name=data.get("Full_Name") or data.get("Name") or "",
            email=data.get("Email") or "",
            owner_name=owner.get("name", "") if isinstance(owner, dict) else "",
            notes=data.get("Notes") or "",
            raw=data,
        )


@dataclass
class CrmEmail:
    """An email from a CRM record's email history."""

    subject: str = ""
    sender: str = ""
    to: str = ""
    message_id: str = ""
    content: str = ""
    sent_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrmEmail":
        sender = data.get("from") or {}
        return cls(
            subject=data.get("subject") or "",
            sender=sender.get("email", "") if isinstance(sender, dict) else str(sender),
            to=", ".join(t.get("email", "") for t in data.get("to") or []),
            message_id=data.get("message_id") or "",
            content=data.get("content") or "",
            sent_time=data.get("sent_time"),
        )


@dataclass
class Checkpoint:
    """Last lead processed by the lead migration."""

    last_lead_email: str | None = None
    last_lead_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Checkpoint":
        return cls(
            last_lead_email=data.get("lastLeadEmail"),
            last_lead_id=data.get("lastLeadId"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON storage."""
        return {
            "lastLeadEmail": self.last_lead_email,
            "lastLeadId": self.last_lead_id,
        }


@dataclass
class ProcessingResult:
    """Result from handling a webhook event."""

    success: bool
    action: str  # e.g., "files_synced", "skipped"
    event_type: str = ""
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
