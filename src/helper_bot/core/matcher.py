"""Record lookup by free-text query.

This module implements the RecordMatcher, which resolves what a user typed
in an update command to records of one collection:

1. Title substring search (store-side "contains" filter, small page)
2. If nothing matched and the query looks like a record id, a direct fetch

The matcher only reports what it found. Deciding what to do with zero or
several matches is up to the caller.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from helper_bot.models.effect import StoreFetch, StoreQuery
from helper_bot.utils.async_helpers import StoreError, StoreTimeoutError

if TYPE_CHECKING:
    from helper_bot.core.effects import EffectRunner
    from helper_bot.models.record import RequestRecord

log = structlog.get_logger()

RECORD_ID_PATTERN = re.compile(r"^[a-f0-9]{32}$")


def looks_like_record_id(query: str) -> bool:
    """Return True if query has the exact shape of a record identifier."""
    return RECORD_ID_PATTERN.fullmatch(query) is not None


class RecordMatcher:
    """Finds records in a collection matching a free-text query.

    Example:
        matcher = RecordMatcher(runner, page_size=5)
        records = await matcher.find(collection_id, "dark mode")
        if len(records) == 1:
            ...
    """

    DEFAULT_PAGE_SIZE = 5

    def __init__(self, runner: EffectRunner, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        """Initialize the RecordMatcher.

        Args:
            runner: Effect runner for the current event
            page_size: Maximum number of title matches to return
        """
        self._runner = runner
        self._page_size = page_size

    async def find(self, collection_id: str, query: str) -> list[RequestRecord]:
        """Find records in a collection whose title contains query.

        Args:
            collection_id: Collection to search
            query: Title fragment, or an exact record identifier

        Returns:
            Matching records; empty if nothing matched

        Raises:
            StoreTimeoutError: If the store did not answer in time
            StoreError: If the title search itself failed
        """
        records: list[RequestRecord] = await self._runner.run(
            StoreQuery(
                collection_id=collection_id,
                title_contains=query,
                page_size=self._page_size,
            )
        )
        log.debug("title_search_complete", query=query, matches=len(records))

        if records or not looks_like_record_id(query):
            return list(records)

        return await self._find_by_id(collection_id, query)

    async def _find_by_id(self, collection_id: str, record_id: str) -> list[RequestRecord]:
        try:
            record: RequestRecord = await self._runner.run(StoreFetch(record_id=record_id))
        except StoreTimeoutError:
            raise
        except StoreError as e:
            log.info("record_id_lookup_failed", record_id=record_id, error=str(e))
            return []

        if record.collection_id != collection_id:
            log.info(
                "record_in_other_collection",
                record_id=record_id,
                collection_id=record.collection_id,
            )
            return []

        return [record]
