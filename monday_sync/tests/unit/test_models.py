"""Unit tests for core models."""

from monday_sync.core.models import (
    Checkpoint,
    CrmEmail,
    CrmRecord,
    EventType,
    WebhookEvent,
)


class TestWebhookEvent:
    """Tests for WebhookEvent model."""

    def test_from_dict(self, create_pulse_payload):
        """Test parsing a create_pulse event."""
        event = WebhookEvent.from_dict(create_pulse_payload["event"])

        assert event.type == EventType.CREATE_PULSE
        assert event.board_id == 1525879275
        assert event.pulse_id == 42

    def test_email_from_column_values(self, create_pulse_payload):
        event = WebhookEvent.from_dict(create_pulse_payload["event"])
        assert event.email("e_mail__1") == "jane.doe@example.com"

    def test_email_falls_back_to_text(self):
        """Test email columns that only carry a text value."""
        event = WebhookEvent.from_dict({"columnValues": {"e_mail__1": {"text": "a@b.com"}}})
        assert event.email("e_mail__1") == "a@b.com"

    def test_email_missing(self):
        event = WebhookEvent.from_dict({"type": "create_pulse"})
        assert event.email("e_mail__1") is None

    def test_files_from_column_values(self, create_pulse_payload):
        event = WebhookEvent.from_dict(create_pulse_payload["event"])
        files = event.files("upload_file__1")

        assert [f.name for f in files] == ["blood-test.pdf", "consent.pdf"]
        assert files[0].asset_id == "501"

    def test_files_from_column_update_value(self):
        """Test column updates read files from the new value."""
        event = WebhookEvent.from_dict({
            "type": "update_column_value",
            "columnId": "upload_file__1",
            "value": {"files": [{"assetId": 7, "name": "scan.png"}]},
        })
        files = event.files("upload_file__1")

        assert len(files) == 1
        assert files[0].name == "scan.png"

    def test_files_missing(self):
        event = WebhookEvent.from_dict({"type": "create_pulse", "columnValues": {}})
        assert event.files("upload_file__1") == []


class TestCrmModels:
    """Tests for CRM models."""

    def test_record_from_dict(self):
        record = CrmRecord.from_dict({
            "id": 123,
            "Full_Name": "Jane Doe",
            "Email": "jane@example.com",
            "Owner": {"name": "Maria Lopez", "id": "9"},
            "Notes": "Called twice",
        })

        assert record.id == "123"
        assert record.name == "Jane Doe"
        assert record.owner_name == "Maria Lopez"
        assert record.notes == "Called twice"

    def test_record_uses_name_field(self):
        """Test modules that expose Name instead of Full_Name."""
        record = CrmRecord.from_dict({"id": "1", "Name": "John", "Email": None})
        assert record.name == "John"
        assert record.email == ""

    def test_email_from_dict(self):
        email = CrmEmail.from_dict({
            "subject": "Results",
            "from": {"email": "clinic@example.com"},
            "to": [{"email": "a@example.com"}, {"email": "b@example.com"}],
            "message_id": "abc",
            "sent_time": "2024-03-05T15:04:05+01:00",
        })

        assert email.sender == "clinic@example.com"
        assert email.to == "a@example.com, b@example.com"
        assert email.message_id == "abc"


class TestCheckpoint:
    """Tests for Checkpoint model."""

    def test_to_dict_uses_stored_keys(self):
        checkpoint = Checkpoint(last_lead_email="a@b.com", last_lead_id="77")
        assert checkpoint.to_dict() == {"lastLeadEmail": "a@b.com", "lastLeadId": "77"}

    def test_from_dict(self):
        checkpoint = Checkpoint.from_dict({"lastLeadEmail": "a@b.com", "lastLeadId": "77"})
        assert checkpoint.last_lead_id == "77"
