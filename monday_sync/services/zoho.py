"""
Zoho CRM API client.

Uses the OAuth2 refresh-token flow. The access token is cached on disk so
short-lived batch runs do not request a new one every time.
"""

import json
import time
from pathlib import Path
from typing import Any, Iterator

import requests

from monday_sync.config import settings
from monday_sync.core.logging import get_logger
from monday_sync.core.models import CrmEmail, CrmRecord

log = get_logger(__name__)

# Tokens are renewed one minute before they expire
TOKEN_EXPIRY_MARGIN = 60
DEFAULT_TOKEN_LIFETIME = 3600

NO_CONTENT = "No content available"


class ZohoAuthError(Exception):
    """Raised when no access token can be obtained."""


def _error_code(response: requests.Response | None) -> str | None:
    if response is None:
        return None
    try:
        return response.json().get("code")
    except ValueError:
        return None


class ZohoClient:
    """Client for Zoho CRM REST operations."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        refresh_token: str | None = None,
        accounts_url: str | None = None,
        api_domain: str | None = None,
        token_cache_path: Path | str | None = None,
        page_size: int | None = None,
    ):
        self.client_id = client_id or settings.zoho_client_id
        self.client_secret = client_secret or settings.zoho_client_secret
        self.refresh_token = refresh_token or settings.zoho_refresh_token
        self.accounts_url = (accounts_url or settings.zoho_accounts_url).rstrip("/")
        self.api_domain = (api_domain or settings.zoho_api_domain).rstrip("/")
        self.token_cache_path = Path(token_cache_path or settings.token_cache_path)
        self.page_size = page_size or settings.zoho_page_size
        self.timeout = 30

        self._access_token: str | None = None
        self._expires_at: float = 0.0

    # Auth

    def _load_cached_token(self) -> dict | None:
        if not self.token_cache_path.exists():
            return None
        try:
            return json.loads(self.token_cache_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.warning("token_cache_unreadable", path=str(self.token_cache_path), error=str(e))
            return None

    def _save_cached_token(self, token: str, expires_in: int) -> None:
        self.token_cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_cache_path.write_text(
            json.dumps({
                "accessToken": token,
                "timestamp": int(time.time() * 1000),
                "expiresIn": expires_in,
            }),
            encoding="utf-8",
        )

    def get_access_token(self, force_renew: bool = False) -> str:
        """
        Return a valid access token, renewing it when needed.

        Order: in-memory token, cached token on disk, refresh-token grant.

        Raises:
            ZohoAuthError: if the refresh-token grant fails
        """
        now = time.time()
        if not force_renew:
            if self._access_token and now < self._expires_at:
                return self._access_token

            cached = self._load_cached_token()
            if cached and cached.get("accessToken"):
                lifetime = cached.get("expiresIn", DEFAULT_TOKEN_LIFETIME)
                expires_at = cached.get("timestamp", 0) / 1000 + lifetime - TOKEN_EXPIRY_MARGIN
                if now < expires_at:
                    log.debug("using_cached_access_token")
                    self._access_token = cached["accessToken"]
                    self._expires_at = expires_at
                    return self._access_token

        try:
            response = requests.post(
                f"{self.accounts_url}/oauth/v2/token",
                params={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "refresh_token",
                    "refresh_token": self.refresh_token,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            log.error("access_token_error", error=str(e))
            raise ZohoAuthError(f"Error obtaining access token: {e}") from e

        token = data.get("access_token")
        if not token:
            log.error("access_token_unexpected_response", response=data)
            raise ZohoAuthError(f"Unexpected token response: {data}")

        expires_in = int(data.get("expires_in", DEFAULT_TOKEN_LIFETIME))
        self._access_token = token
        self._expires_at = now + expires_in - TOKEN_EXPIRY_MARGIN
        self._save_cached_token(token, expires_in)
        log.info("access_token_obtained")
        return token

    def _get(self, path: str, params: dict | None = None, stream: bool = False) -> requests.Response:
        """GET a CRM endpoint, renewing the token once on INVALID_TOKEN."""
        for attempt in range(2):
            token = self.get_access_token(force_renew=attempt > 0)
            response = requests.get(
                f"{self.api_domain}{path}",
                params=params,
                headers={"Authorization": f"Zoho-oauthtoken {token}"},
                timeout=self.timeout,
                stream=stream,
            )
            if response.status_code == 401 and _error_code(response) == "INVALID_TOKEN" and attempt == 0:
                log.info("invalid_token_renewing")
                response.close()
                continue
            response.raise_for_status()
            return response
        return response

    def _get_json(self, path: str, params: dict | None = None) -> dict[str, Any]:
        """GET a CRM endpoint and decode its body; 204 decodes to {}."""
        response = self._get(path, params=params)
        if response.status_code == 204:
            return {}
        return response.json()

    # Records

    def iter_records(self, module: str, fields: str = "id,Full_Name,Name,Email") -> Iterator[CrmRecord]:
        """
        Yield every record of a module.

        Follows `next_page_token` when the API returns one, page numbers
        otherwise. Stops on an empty page or on any error.
        """
        page = 1
        page_token = None
        fetched = 0

        while True:
            params: dict[str, Any] = {"fields": fields, "per_page": self.page_size}
            if page_token:
                params["page_token"] = page_token
            else:
                params["page"] = page

            try:
                body = self._get_json(f"/crm/v3/{module}", params=params)
            except requests.HTTPError as e:
                if _error_code(e.response) == "DISCRETE_PAGINATION_LIMIT_EXCEEDED":
                    log.error("pagination_limit_exceeded", module=module, fetched=fetched)
                else:
                    log.error("fetch_records_error", module=module, page=page, error=str(e))
                return
            except (requests.RequestException, ValueError) as e:
                log.error("fetch_records_error", module=module, page=page, error=str(e))
                return

            records = body.get("data") or []
            if not records:
                break

            for record in records:
                yield CrmRecord.from_dict(record)
            fetched += len(records)
            log.info("records_page_fetched", module=module, page=page, count=len(records), total=fetched)

            info = body.get("info") or {}
            page_token = info.get("next_page_token")
            if not page_token and not info.get("more_records"):
                break
            page += 1

        log.info("records_fetched", module=module, total=fetched)

    def get_record_emails(self, module: str, record_id: str) -> list[CrmEmail]:
        """List the emails attached to a record."""
        try:
            emails = self._get_json(f"/crm/v3/{module}/{record_id}/Emails").get("Emails") or []
        except (requests.RequestException, ValueError) as e:
            log.error("fetch_emails_error", module=module, record_id=record_id, error=str(e))
            return []

        log.info("record_emails_found", record_id=record_id, count=len(emails))
        return [CrmEmail.from_dict(e) for e in emails]

    def get_email_content(self, module: str, record_id: str, message_id: str) -> str:
        """Fetch the full HTML content of one email."""
        try:
            body = self._get_json(f"/crm/v3/{module}/{record_id}/Emails/{message_id}")
        except (requests.RequestException, ValueError) as e:
            log.error("fetch_email_content_error", record_id=record_id, message_id=message_id, error=str(e))
            return NO_CONTENT

        related = body.get("email_related_list") or []
        if not related:
            return NO_CONTENT
        return related[0].get("content") or NO_CONTENT

    # Attachments

    def list_attachments(self, module: str, record_id: str) -> list[dict[str, Any]]:
        try:
            return self._get_json(f"/crm/v2/{module}/{record_id}/Attachments").get("data") or []
        except (requests.RequestException, ValueError) as e:
            log.error("fetch_attachments_error", record_id=record_id, error=str(e))
            return []

    def download_attachment(
        self, module: str, record_id: str, attachment_id: str, destination: Path
    ) -> Path | None:
        """Stream an attachment into destination; nothing is left behind on failure."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._get(
                f"/crm/v2/{module}/{record_id}/Attachments/{attachment_id}", stream=True
            ) as response, open(destination, "wb") as fh:
                for chunk in response.iter_content(chunk_size=65536):
                    fh.write(chunk)
        except (OSError, requests.RequestException) as e:
            log.error("download_attachment_error", attachment_id=attachment_id, error=str(e))
            destination.unlink(missing_ok=True)
            return None

        log.info("attachment_downloaded", path=str(destination))
        return destination
