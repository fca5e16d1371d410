"""Notion record store adapter using the Notion REST API over httpx.

This module implements the RecordStore protocol for Notion databases:
- One database per request category (ids from configuration)
- Records are pages; title, status, Slack link and creation date are
  page properties whose names are configurable
- The thread transcript is written as paragraph blocks

Secret redaction is applied to page content before it leaves the process.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog

from ...config.schema import NotionConfig
from ...models.category import Category
from ...models.record import RecordCreate, RequestRecord
from ...utils.async_helpers import StoreError, StoreNotFoundError, StoreTimeoutError
from ...utils.security import SecretRedactor

log = structlog.get_logger()

RICH_TEXT_LIMIT = 2000
MAX_CHILD_BLOCKS = 100
MAX_RICH_TEXT_ITEMS = 100
UNTITLED = "Untitled"
UNKNOWN_STATUS = "Unknown"


class NotionAdapterError(StoreError):
    """Base exception for Notion adapter errors."""


def normalize_id(notion_id: str) -> str:
    """Strip dashes from a Notion UUID ("1a2b...-..." -> 32 hex chars)."""
    return notion_id.replace("-", "").lower()


def chunk_text(text: str, size: int = RICH_TEXT_LIMIT) -> list[str]:
    """Split text into pieces no longer than the rich text limit."""
    if not text:
        return [""]
    return [text[i : i + size] for i in range(0, len(text), size)]


def _plain_text(rich_text: list[dict[str, Any]]) -> str:
    return "".join(
        part.get("plain_text") or (part.get("text") or {}).get("content", "")
        for part in rich_text
    )


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp from the Notion API (which uses a Z suffix)."""
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class NotionAdapter:
    """Notion record store implementing the RecordStore protocol.

    Example:
        adapter = NotionAdapter(config)
        records = await adapter.query(
            config.databases.feature,
            status_not_equals="Completed",
        )
        await adapter.close()
    """

    def __init__(
        self,
        config: NotionConfig,
        client: httpx.AsyncClient | None = None,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the Notion adapter.

        Args:
            config: Notion-specific configuration.
            client: Preconfigured HTTP client (tests inject a mock transport).
            redactor: Secret redactor for page content. If None, creates default.
        """
        self._config = config
        self._redactor = redactor or SecretRedactor()
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
        )
        self._headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        }
        databases = config.databases
        self._categories = {
            databases.feature: Category.FEATURE,
            databases.bd: Category.BUSINESS_DEVELOPMENT,
        }

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one API request and return the decoded JSON body.

        Raises:
            StoreTimeoutError: If the request timed out
            StoreNotFoundError: On HTTP 404 (object missing or not shared)
            NotionAdapterError: On any other HTTP or transport failure
        """
        try:
            response = await self._client.request(method, path, json=json, headers=self._headers)
        except httpx.TimeoutException as e:
            log.warning("notion_request_timeout", method=method, path=path)
            raise StoreTimeoutError("Request timed out") from e
        except httpx.HTTPError as e:
            log.error("notion_request_failed", method=method, path=path, error=str(e))
            raise NotionAdapterError(f"Notion request failed: {e}") from e

        if response.is_success:
            data: dict[str, Any] = response.json()
            return data

        message = self._error_message(response)
        log.warning(
            "notion_api_error",
            method=method,
            path=path,
            status_code=response.status_code,
            error=message,
        )
        if response.status_code == 404:
            raise StoreNotFoundError(message)
        raise NotionAdapterError(message)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"

    # =========================================================================
    # Mapping
    # =========================================================================

    def _page_to_record(self, page: dict[str, Any]) -> RequestRecord:
        """Map a Notion page object to a RequestRecord."""
        properties: dict[str, Any] = page.get("properties") or {}
        parent: dict[str, Any] = page.get("parent") or {}
        collection_id = normalize_id(parent.get("database_id", ""))

        source = properties.get(self._config.source_property) or {}
        created = (properties.get(self._config.created_property) or {}).get("date") or {}

        return RequestRecord(
            identifier=normalize_id(page.get("id", "")),
            title=self._extract_title(properties),
            status=self._extract_status(properties),
            collection_id=collection_id,
            category=self._categories.get(collection_id),
            source_reference=source.get("url"),
            created_at=_parse_timestamp(created.get("start")),
            last_edited_at=_parse_timestamp(page.get("last_edited_time")),
        )

    def _extract_title(self, properties: dict[str, Any]) -> str:
        title_prop = properties.get(self._config.title_property)
        if title_prop is None:
            title_prop = next(
                (prop for prop in properties.values() if prop.get("type") == "title"),
                {},
            )
        return _plain_text(title_prop.get("title") or []) or UNTITLED

    def _extract_status(self, properties: dict[str, Any]) -> str:
        status_prop = properties.get(self._config.status_property) or {}
        select = status_prop.get("select") or status_prop.get("status") or {}
        return str(select.get("name") or UNKNOWN_STATUS)

    def _build_properties(self, record: RecordCreate) -> dict[str, Any]:
        config = self._config
        return {
            config.title_property: {"title": [{"text": {"content": record.title}}]},
            config.status_property: {"select": {"name": record.status}},
            config.source_property: {"url": record.source_reference},
            config.created_property: {"date": {"start": record.created_at.isoformat()}},
        }

    def _build_children(self, body: tuple[str, ...]) -> list[dict[str, Any]]:
        """Render body paragraphs as paragraph blocks within API limits."""
        blocks = []
        for paragraph in body[:MAX_CHILD_BLOCKS]:
            text = self._redactor.redact(paragraph)
            rich_text = [
                {"type": "text", "text": {"content": chunk}}
                for chunk in chunk_text(text)[:MAX_RICH_TEXT_ITEMS]
            ]
            blocks.append(
                {
                    "object": "block",
                    "type": "paragraph",
                    "paragraph": {"rich_text": rich_text},
                }
            )
        return blocks

    # =========================================================================
    # RecordStore
    # =========================================================================

    async def query(
        self,
        collection_id: str,
        title_contains: str | None = None,
        status_not_equals: str | None = None,
        page_size: int = 10,
    ) -> list[RequestRecord]:
        """Query a database, most recently edited first."""
        filters: list[dict[str, Any]] = []
        if title_contains:
            filters.append(
                {"property": self._config.title_property, "title": {"contains": title_contains}}
            )
        if status_not_equals:
            filters.append(
                {
                    "property": self._config.status_property,
                    "select": {"does_not_equal": status_not_equals},
                }
            )

        payload: dict[str, Any] = {
            "sorts": [{"timestamp": "last_edited_time", "direction": "descending"}],
            "page_size": page_size,
        }
        if len(filters) == 1:
            payload["filter"] = filters[0]
        elif filters:
            payload["filter"] = {"and": filters}

        data = await self._request("POST", f"/databases/{collection_id}/query", json=payload)
        records = [self._page_to_record(page) for page in data.get("results", [])]

        log.debug("notion_query_complete", collection_id=collection_id, results=len(records))
        return records

    async def fetch_by_id(self, record_id: str) -> RequestRecord:
        """Fetch one page by id."""
        data = await self._request("GET", f"/pages/{record_id}")
        return self._page_to_record(data)

    async def create(self, collection_id: str, record: RecordCreate) -> RequestRecord:
        """Create a page in a database."""
        payload = {
            "parent": {"database_id": collection_id},
            "properties": self._build_properties(record),
            "children": self._build_children(record.body),
        }
        data = await self._request("POST", "/pages", json=payload)
        created = self._page_to_record(data)

        log.info("notion_page_created", record_id=created.identifier, collection_id=collection_id)
        return created

    async def update_status(self, record_id: str, status: str) -> None:
        """Set the status select of a page."""
        payload = {"properties": {self._config.status_property: {"select": {"name": status}}}}
        await self._request("PATCH", f"/pages/{record_id}", json=payload)
        log.info("notion_status_updated", record_id=record_id, status=status)

    async def check_collection(self, collection_id: str) -> str:
        """Retrieve a database and return its title."""
        data = await self._request("GET", f"/databases/{collection_id}")
        return _plain_text(data.get("title") or []) or UNTITLED
