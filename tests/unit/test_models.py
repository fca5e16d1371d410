"""Tests for data models."""

import dataclasses
from datetime import UTC, datetime

import pytest

from helper_bot.models.category import (
    BUSINESS_DEVELOPMENT_PROFILE,
    CATEGORY_PROFILES,
    FEATURE_PROFILE,
    Category,
    detect_category,
    get_profile,
)
from helper_bot.models.command import StatusCommand, UpdateCommand
from helper_bot.models.effect import PostMessage, StoreQuery
from helper_bot.models.message import HandlingResult, MentionEvent, Outcome
from helper_bot.models.record import RecordCreate, RequestRecord


class TestCategoryProfiles:
    """Test category profiles and status vocabularies."""

    def test_feature_profile(self):
        """Test the feature status set and its terminal status."""
        assert FEATURE_PROFILE.statuses == (
            "New",
            "In Progress",
            "Pending Review",
            "Completed",
            "Rejected",
        )
        assert FEATURE_PROFILE.initial_status == "New"
        assert FEATURE_PROFILE.terminal_status == "Completed"
        assert FEATURE_PROFILE.key == "feature"

    def test_business_development_profile(self):
        """Test the business development status set."""
        assert BUSINESS_DEVELOPMENT_PROFILE.statuses == ("Not in CRM yet", "Added to CRM")
        assert BUSINESS_DEVELOPMENT_PROFILE.initial_status == "Not in CRM yet"
        assert BUSINESS_DEVELOPMENT_PROFILE.terminal_status == "Added to CRM"
        assert BUSINESS_DEVELOPMENT_PROFILE.label == "BD"

    def test_terminal_status_is_in_status_set(self):
        """Test that every terminal status belongs to its own set."""
        for profile in CATEGORY_PROFILES.values():
            assert profile.terminal_status in profile.statuses

    def test_get_profile(self):
        """Test looking up profiles by category."""
        assert get_profile(Category.FEATURE) is FEATURE_PROFILE
        assert get_profile(Category.BUSINESS_DEVELOPMENT) is BUSINESS_DEVELOPMENT_PROFILE

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("completed", "Completed"),
            ("  IN PROGRESS ", "In Progress"),
            ("Pending review", "Pending Review"),
            ("done", None),
            ("Completed!", None),
            ("", None),
        ],
    )
    def test_canonical_status(self, text, expected):
        """Test case-insensitive exact status matching."""
        assert FEATURE_PROFILE.canonical_status(text) == expected

    def test_canonical_status_is_per_category(self):
        """Test that statuses of the other category are not accepted."""
        assert FEATURE_PROFILE.canonical_status("Added to CRM") is None
        assert BUSINESS_DEVELOPMENT_PROFILE.canonical_status("added to crm") == "Added to CRM"


class TestDetectCategory:
    """Test category detection from free text."""

    @pytest.mark.parametrize(
        "text",
        ["status bd", "BD lead", "add Acme to Business Development", "abdomen"],
    )
    def test_business_development(self, text):
        """Test that any marker selects business development."""
        assert detect_category(text) == Category.BUSINESS_DEVELOPMENT

    def test_feature_default(self):
        """Test that text without markers is a feature request."""
        assert detect_category("please add dark mode") == Category.FEATURE


class TestMentionEvent:
    """Test MentionEvent dataclass."""

    def test_reply_thread_defaults_to_event(self):
        """Test that a top-level mention replies in its own thread."""
        event = MentionEvent(
            channel_id="C1",
            event_ts="1712345678.000200",
            thread_ts=None,
            user_id="U1",
            text="<@UBOT> help",
            raw_event={},
        )
        assert event.reply_thread_ts == "1712345678.000200"

    def test_reply_thread_uses_existing_thread(self):
        """Test that a threaded mention replies in that thread."""
        event = MentionEvent(
            channel_id="C1",
            event_ts="1712345678.000200",
            thread_ts="1712345678.000100",
            user_id="U1",
            text="<@UBOT> save",
            raw_event={"type": "app_mention"},
        )
        assert event.reply_thread_ts == "1712345678.000100"

    def test_is_immutable(self):
        """Test that events cannot be modified."""
        event = MentionEvent("C1", "1.0", None, "U1", "hi", {})
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.text = "changed"  # type: ignore[misc]


class TestRecords:
    """Test record dataclasses."""

    def test_request_record_defaults(self):
        """Test optional record fields."""
        record = RequestRecord(
            identifier="c" * 32,
            title="Dark mode",
            status="New",
            collection_id="a" * 32,
        )
        assert record.category is None
        assert record.source_reference is None
        assert record.created_at is None

    def test_record_create_body_defaults_empty(self):
        """Test that new records have no body paragraphs by default."""
        new = RecordCreate(
            title="Feature request: Dark mode",
            status="New",
            source_reference="https://slack.com/archives/C1/p1",
            created_at=datetime(2024, 4, 5, tzinfo=UTC),
        )
        assert new.body == ()


class TestCommandsAndEffects:
    """Test command and effect values."""

    def test_commands_compare_by_value(self):
        """Test that equal commands are equal."""
        assert StatusCommand(Category.FEATURE) == StatusCommand(Category.FEATURE, False)
        assert UpdateCommand(Category.FEATURE, "foo", "New") != UpdateCommand(
            Category.FEATURE, "foo", "Completed"
        )

    def test_effect_defaults(self):
        """Test effect defaults."""
        query = StoreQuery(collection_id="a" * 32)
        assert query.title_contains is None
        assert query.status_not_equals is None
        assert query.page_size == 10
        assert PostMessage("C1", "hi").thread_ts is None

    def test_effects_are_hashable(self):
        """Test that effects can be collected in sets."""
        assert len({PostMessage("C1", "hi"), PostMessage("C1", "hi")}) == 1

    def test_handling_result_defaults(self):
        """Test that a result without effects has an empty journal."""
        result = HandlingResult(command=None, outcome=Outcome.ERROR)
        assert result.effects == ()
        assert result.outcome.value == "error"
