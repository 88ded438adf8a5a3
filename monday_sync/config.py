"""
Centralized configuration using Pydantic Settings.

All environment variables are loaded and validated here.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # monday.com
    monday_api_key: str = ""
    monday_api_url: str = "https://api.monday.com/v2"
    monday_file_url: str = "https://api.monday.com/v2/file"
    monday_page_limit: int = 500
    monday_error_wait_seconds: float = 10.0

    # Webhook source columns (board the webhooks come from)
    source_email_column: str = "e_mail__1"
    source_file_column: str = "upload_file__1"

    # Target boards: board id -> email column / file column
    default_email_column: str = "e_mail9__1"
    email_column_map: dict[int, str] = {
        1524952207: "e_mail9__1",
        1556223297: "e_mail9__1",
        1565753842: "contact_email",
        1504994976: "contact_email",
    }
    file_column_map: dict[int, str] = {
        1524952207: "archivo3__1",
        1556223297: "archivo51__1",
        1565753842: "archivo3__1",
        1504994976: "archivo2__1",
    }

    # Lead migration boards: board id -> column
    lead_email_column_map: dict[int, str] = {
        1499741852: "lead_email",
        1565676276: "lead_email",
    }
    lead_owner_column_map: dict[int, str] = {
        1499741852: "personas7__1",
        1565676276: "personas__1",
    }
    lead_text_column_map: dict[int, str] = {
        1499741852: "texto__1",
        1565676276: "texto__1",
    }
    lead_notes_column_map: dict[int, str] = {
        1499741852: "texto_largo__1",
        1565676276: "texto_largo__1",
    }

    # Webhook forwarding: board id -> base URL of the service handling it
    forward_map: dict[int, str] = {
        1525879275: "http://localhost:3001",
        1556224598: "http://localhost:3002",
    }

    # Zoho CRM
    zoho_client_id: str = ""
    zoho_client_secret: str = ""
    zoho_refresh_token: str = ""
    zoho_accounts_url: str = "https://accounts.zoho.eu"
    zoho_api_domain: str = "https://www.zohoapis.eu"
    zoho_records_module: str = "PatientsNew"
    zoho_page_size: int = 200

    # Email archive cleanup: blocks removed from email bodies before rendering
    email_strip_patterns: list[str] = [
        r"CONFIDENTIALITY NOTICE:[\s\S]*?(?=IMMUCURA LIMITED|$)",
        r"IMMUCURA LIMITED[\s\S]*?(?=\n\n|\s*$)",
        r"\[crm\\img_id:[^\]]*\]",
        r"AVISO LEGAL:[\s\S]*?(?=PROTECCIÓN DE DATOS|$)",
        r"(?i)confidencial sometida a secreto profesional[\s\S]*?(?=expresa de Immucura Med S\.L\.|$)",
        r"(?i)expresa de Immucura Med S\.L\.[\s\S]*?(?=PROTECCIÓN DE DATOS|$)",
        r"LEGAL WARNING:[\s\S]*?(?=This message and its attachments|$)",
        r"(?i)PROTECCIÓN DE DATOS[\s\S]*?(?=\n\n|\s*$)",
    ]

    # Local state
    data_dir: Path = Path("data")

    # Scheduler (periodic email archive)
    scheduler_enabled: bool = False
    scheduler_archive_cron: str = "0 2 * * *"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def ledger_path(self) -> Path:
        """Uploaded-files ledger location."""
        return self.data_dir / "uploaded-files.json"

    @property
    def token_cache_path(self) -> Path:
        """Zoho access token cache location."""
        return self.data_dir / "access-token.json"

    @property
    def checkpoint_path(self) -> Path:
        """Lead migration progress checkpoint location."""
        return self.data_dir / "progress.json"

    @property
    def download_dir(self) -> Path:
        """Where webhook assets are downloaded before re-upload."""
        return self.data_dir / "files-uploaded"

    @property
    def archive_dir(self) -> Path:
        """Where email archive PDFs are written."""
        return self.data_dir / "mails-downloads"

    @property
    def attachments_dir(self) -> Path:
        """Where CRM attachments are downloaded."""
        return self.data_dir / "crm-attachments"


# Global settings instance
settings = Settings()
