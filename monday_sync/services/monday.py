"""
monday.com API client: GraphQL queries, asset downloads and file uploads.
"""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterator

import requests

from monday_sync.config import settings
from monday_sync.core.logging import get_logger
from monday_sync.core.models import BoardItem

log = get_logger(__name__)


class MondayAPIError(Exception):
    """Raised when monday.com returns an unusable response."""


class MissingEmailError(ValueError):
    """Raised when a lookup by email is attempted without an email."""


ITEMS_BY_COLUMN_QUERY = """
query ($boardId: ID!, $columnId: String!, $email: String!, $limit: Int!, $cursor: String) {
    items_page_by_column_values (
        limit: $limit,
        board_id: $boardId,
        columns: [{column_id: $columnId, column_values: [$email]}],
        cursor: $cursor
    ) {
        cursor
        items {
            id
            name
            column_values(ids: [$columnId]) {
                text
            }
        }
    }
}
"""

BOARD_ITEMS_QUERY = """
query ($boardId: ID!, $limit: Int!) {
    boards (ids: [$boardId]) {
        items_page (limit: $limit) {
            cursor
            items { id name }
        }
    }
}
"""

NEXT_ITEMS_QUERY = """
query ($cursor: String!, $limit: Int!) {
    next_items_page (limit: $limit, cursor: $cursor) {
        cursor
        items { id name }
    }
}
"""


class MondayClient:
    """Client for monday.com API operations."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        file_url: str | None = None,
        email_column_map: dict[int, str] | None = None,
        page_limit: int | None = None,
        error_wait_seconds: float | None = None,
    ):
        self.api_key = api_key or settings.monday_api_key
        self.api_url = api_url or settings.monday_api_url
        self.file_url = file_url or settings.monday_file_url
        self.email_column_map = (
            email_column_map if email_column_map is not None else settings.email_column_map
        )
        self.page_limit = page_limit or settings.monday_page_limit
        self.error_wait_seconds = (
            error_wait_seconds if error_wait_seconds is not None
            else settings.monday_error_wait_seconds
        )
        self.timeout = 30

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def execute(self, query: str, variables: dict | None = None) -> dict[str, Any]:
        """
        Run a GraphQL query or mutation.

        Returns the full response body, including any `errors` entry.
        Raises requests.RequestException on transport or HTTP errors.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        response = requests.post(
            self.api_url,
            json=payload,
            headers={**self._auth_headers, "Content-Type": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    # Assets

    def get_public_url(self, asset_id: str) -> str:
        """Resolve the public download URL of an uploaded asset."""
        try:
            result = self.execute(
                "query ($ids: [ID!]!) { assets (ids: $ids) { public_url } }",
                {"ids": [str(asset_id)]},
            )
        except requests.RequestException as e:
            raise MondayAPIError(f"Error in the GraphQL query: {e}") from e

        assets = (result.get("data") or {}).get("assets") or []
        if not assets or not assets[0].get("public_url"):
            raise MondayAPIError(f"Public URL not found for asset {asset_id}")
        return assets[0]["public_url"]

    def download_file(self, url: str, destination: Path) -> Path:
        """Stream url into destination, creating parent directories."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(destination, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=65536):
                        fh.write(chunk)
        except requests.RequestException as e:
            raise MondayAPIError(f"Error downloading {url}: {e}") from e

        log.info("file_downloaded", path=str(destination))
        return destination

    # Item lookup

    def find_items_by_email(self, board_ids: list[int], email: str) -> list[BoardItem]:
        """
        Find the items whose email column equals email, across boards.

        Boards are searched concurrently. Each board is paginated with
        cursors until the cursor comes back null. A GraphQL error stops
        that board's pagination after a pause; a transport error stops it
        right away.

        Raises:
            MissingEmailError: if email is empty
        """
        if not email:
            raise MissingEmailError("Email is undefined")
        if not board_ids:
            return []

        with ThreadPoolExecutor(max_workers=len(board_ids)) as pool:
            per_board = list(pool.map(lambda b: self._find_on_board(b, email), board_ids))

        return [item for items in per_board for item in items]

    def _find_on_board(self, board_id: int, email: str) -> list[BoardItem]:
        column_id = self.email_column_map.get(board_id, settings.default_email_column)
        items = []
        cursor = None

        while True:
            try:
                result = self.execute(
                    ITEMS_BY_COLUMN_QUERY,
                    {
                        "boardId": str(board_id),
                        "columnId": column_id,
                        "email": email,
                        "limit": self.page_limit,
                        "cursor": cursor,
                    },
                )
            except requests.RequestException as e:
                log.error("item_search_error", board_id=board_id, email=email, error=str(e))
                break

            if result.get("errors"):
                log.error("item_search_graphql_errors", board_id=board_id, errors=result["errors"])
                time.sleep(self.error_wait_seconds)
                break

            page = (result.get("data") or {}).get("items_page_by_column_values") or {}
            items.extend(page.get("items") or [])
            cursor = page.get("cursor")
            log.debug("item_page_fetched", board_id=board_id, total=len(items))
            if cursor is None:
                break

        matches = [
            BoardItem(board_id=board_id, id=str(item["id"]))
            for item in items
            if any(col.get("text") == email for col in item.get("column_values") or [])
        ]
        if matches:
            log.info("items_found", board_id=board_id, email=email, items=[m.id for m in matches])
        else:
            log.info("items_not_found", board_id=board_id, email=email)
        return matches

    # File upload

    def upload_file_to_column(self, item_id: str, column_id: str, file_path: Path) -> dict | None:
        """
        Upload a local file into an item's file column.

        Returns the response body on success, None on failure.
        """
        mutation = (
            "mutation ($file: File!) { "
            f'add_file_to_column (item_id: {item_id}, column_id: "{column_id}", file: $file) '
            "{ id } }"
        )
        file_path = Path(file_path)
        try:
            with open(file_path, "rb") as fh:
                response = requests.post(
                    self.file_url,
                    data={"query": mutation},
                    files={"variables[file]": (file_path.name, fh)},
                    headers=self._auth_headers,
                    timeout=120,
                )
            response.raise_for_status()
            result = response.json()
        except (OSError, requests.RequestException) as e:
            log.error("file_upload_error", item_id=item_id, column_id=column_id, error=str(e))
            return None

        if result.get("errors") or result.get("error_message"):
            log.error(
                "file_upload_rejected",
                item_id=item_id,
                column_id=column_id,
                errors=result.get("errors") or result.get("error_message"),
            )
            return None

        log.info("file_added_to_column", item_id=item_id, column_id=column_id, file=file_path.name)
        return result

    # Column values

    def change_column_values(self, board_id: int, item_id: str, column_values: dict) -> dict[str, Any]:
        """
        Set several column values on an item.

        Returns the raw response so callers can inspect GraphQL errors.
        """
        mutation = """
        mutation ($boardId: ID!, $itemId: ID!, $values: JSON!) {
            change_multiple_column_values (board_id: $boardId, item_id: $itemId, column_values: $values) {
                id
            }
        }
        """
        return self.execute(
            mutation,
            {"boardId": str(board_id), "itemId": str(item_id), "values": json.dumps(column_values)},
        )

    def clear_column(self, board_id: int, item_id: str, column_id: str) -> bool:
        """Clear a column (e.g. remove every file of a file column)."""
        mutation = """
        mutation ($boardId: ID!, $itemId: ID!, $columnId: String!, $value: JSON!) {
            change_column_value (board_id: $boardId, item_id: $itemId, column_id: $columnId, value: $value) {
                id
            }
        }
        """
        try:
            result = self.execute(
                mutation,
                {
                    "boardId": str(board_id),
                    "itemId": str(item_id),
                    "columnId": column_id,
                    "value": json.dumps({"clear_all": True}),
                },
            )
        except requests.RequestException as e:
            log.error("clear_column_error", item_id=item_id, column_id=column_id, error=str(e))
            return False

        if result.get("errors"):
            log.error("clear_column_graphql_errors", item_id=item_id, errors=result["errors"])
            return False
        log.info("column_cleared", item_id=item_id, column_id=column_id)
        return True

    def iter_board_item_ids(self, board_id: int) -> Iterator[str]:
        """Yield the id of every item on a board."""
        try:
            result = self.execute(BOARD_ITEMS_QUERY, {"boardId": str(board_id), "limit": self.page_limit})
        except requests.RequestException as e:
            log.error("board_items_error", board_id=board_id, error=str(e))
            return
        if result.get("errors"):
            log.error("board_items_graphql_errors", board_id=board_id, errors=result["errors"])
            return

        boards = (result.get("data") or {}).get("boards") or []
        if not boards:
            return
        page = boards[0].get("items_page") or {}

        while True:
            for item in page.get("items") or []:
                yield str(item["id"])
            cursor = page.get("cursor")
            if not cursor:
                return
            try:
                result = self.execute(NEXT_ITEMS_QUERY, {"cursor": cursor, "limit": self.page_limit})
            except requests.RequestException as e:
                log.error("board_items_error", board_id=board_id, error=str(e))
                return
            if result.get("errors"):
                log.error("board_items_graphql_errors", board_id=board_id, errors=result["errors"])
                return
            page = (result.get("data") or {}).get("next_items_page") or {}

    # Users

    def get_user_ids(self) -> dict[str, str]:
        """Map of lower-cased user name to user id, for all account users."""
        try:
            result = self.execute("query { users { id name } }")
        except (requests.RequestException, ValueError) as e:
            log.error("list_users_error", error=str(e))
            return {}

        users = (result.get("data") or {}).get("users") or []
        log.info("users_fetched", count=len(users))
        return {(u.get("name") or "").lower(): str(u["id"]) for u in users if u.get("name")}
