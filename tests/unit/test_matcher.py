"""Tests for record matching."""

import pytest
from conftest import BD_DB, FEATURE_DB, FakeChat, FakeStore

from helper_bot.core.effects import EffectRunner
from helper_bot.core.matcher import RecordMatcher, looks_like_record_id
from helper_bot.models.effect import StoreFetch, StoreQuery
from helper_bot.utils.async_helpers import StoreError, StoreTimeoutError


@pytest.fixture
def runner(fake_chat: FakeChat, fake_store: FakeStore) -> EffectRunner:
    return EffectRunner(fake_chat, fake_store, store_timeout=1.0)


@pytest.fixture
def matcher(runner: EffectRunner) -> RecordMatcher:
    return RecordMatcher(runner, page_size=5)


class TestLooksLikeRecordId:
    """Identifier shape detection."""

    def test_accepts_32_lowercase_hex(self) -> None:
        assert looks_like_record_id("0123456789abcdef0123456789abcdef")

    @pytest.mark.parametrize(
        "query",
        [
            "0123456789ABCDEF0123456789ABCDEF",
            "0123456789abcdef0123456789abcde",
            "01234567-89ab-cdef-0123-456789abcdef",
            "dark mode",
        ],
    )
    def test_rejects_other_shapes(self, query: str) -> None:
        assert not looks_like_record_id(query)


class TestFind:
    """Title search and id fallback."""

    async def test_single_title_match(self, matcher: RecordMatcher, fake_store: FakeStore) -> None:
        record = fake_store.add("Foo widget", "New")
        fake_store.add("Bar", "New")

        assert await matcher.find(FEATURE_DB, "foo") == [record]

    async def test_multiple_title_matches(self, matcher: RecordMatcher, fake_store: FakeStore) -> None:
        fake_store.add("Foo one", "New")
        fake_store.add("Foo two", "New")

        matches = await matcher.find(FEATURE_DB, "Foo")

        assert {m.title for m in matches} == {"Foo one", "Foo two"}

    async def test_uses_configured_page_size(
        self,
        runner: EffectRunner,
        fake_store: FakeStore,
    ) -> None:
        for i in range(8):
            fake_store.add(f"Foo {i}", "New")

        matches = await RecordMatcher(runner).find(FEATURE_DB, "Foo")

        assert len(matches) == 5
        assert runner.journal[0] == StoreQuery(
            collection_id=FEATURE_DB, title_contains="Foo", page_size=5
        )

    async def test_no_match_without_id_shape(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        assert await matcher.find(FEATURE_DB, "nothing") == []
        assert fake_store.calls == ["query"]

    async def test_falls_back_to_id_lookup(
        self,
        matcher: RecordMatcher,
        runner: EffectRunner,
        fake_store: FakeStore,
    ) -> None:
        record = fake_store.add("Untitled", "New", identifier="d" * 32)

        assert await matcher.find(FEATURE_DB, "d" * 32) == [record]
        assert runner.journal[-1] == StoreFetch(record_id="d" * 32)

    async def test_id_lookup_not_found_is_no_match(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        assert await matcher.find(FEATURE_DB, "e" * 32) == []
        assert fake_store.calls == ["query", "fetch_by_id"]

    async def test_id_lookup_other_failure_is_no_match(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        fake_store.fetch_error = StoreError("restricted_resource")
        assert await matcher.find(FEATURE_DB, "e" * 32) == []

    async def test_id_in_other_collection_is_no_match(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        fake_store.add("BD thing", "Not in CRM yet", collection_id=BD_DB, identifier="f" * 32)

        assert await matcher.find(FEATURE_DB, "f" * 32) == []

    async def test_id_lookup_timeout_propagates(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        fake_store.fetch_error = StoreTimeoutError("Request timed out")

        with pytest.raises(StoreTimeoutError):
            await matcher.find(FEATURE_DB, "e" * 32)

    async def test_title_search_failure_propagates(
        self,
        matcher: RecordMatcher,
        fake_store: FakeStore,
    ) -> None:
        fake_store.query_error = StoreError("validation_error")

        with pytest.raises(StoreError):
            await matcher.find(FEATURE_DB, "foo")
