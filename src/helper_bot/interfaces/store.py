"""Abstract interface for the external record store."""

from typing import Protocol

from ..models.record import RecordCreate, RequestRecord


class RecordStore(Protocol):
    """Abstract interface for structured record stores.

    All state lives in the store; implementations must not cache records
    between calls.
    """

    async def query(
        self,
        collection_id: str,
        title_contains: str | None = None,
        status_not_equals: str | None = None,
        page_size: int = 10,
    ) -> list[RequestRecord]:
        """
        Query a collection, most recently edited first.

        Args:
            collection_id: Collection (database) to query
            title_contains: Only records whose title contains this text
            status_not_equals: Exclude records in this status
            page_size: Maximum number of records to return

        Returns:
            Matching records, possibly empty

        Raises:
            StoreNotFoundError: If the collection does not exist
            StoreTimeoutError: If the store did not answer in time
            StoreError: For any other store failure
        """
        ...

    async def fetch_by_id(self, record_id: str) -> RequestRecord:
        """
        Fetch a single record.

        Raises:
            StoreNotFoundError: If no accessible record has this id
            StoreError: For any other store failure
        """
        ...

    async def create(
        self,
        collection_id: str,
        record: RecordCreate,
    ) -> RequestRecord:
        """
        Create a record in a collection.

        Returns:
            The created record with its assigned identifier

        Raises:
            StoreError: If creation fails
        """
        ...

    async def update_status(self, record_id: str, status: str) -> None:
        """
        Set the status field of a record. No other field is touched.

        Raises:
            StoreNotFoundError: If the record does not exist
            StoreError: For any other store failure
        """
        ...

    async def check_collection(self, collection_id: str) -> str:
        """
        Verify a collection is reachable.

        Returns:
            The collection's title

        Raises:
            StoreNotFoundError: If the collection does not exist or is not shared
            StoreError: For any other store failure
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the store client."""
        ...
