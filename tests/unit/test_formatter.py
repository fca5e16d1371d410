"""Tests for reply rendering."""

from datetime import UTC, datetime

from helper_bot.core.formatter import (
    render_candidates,
    render_created,
    render_footer,
    render_help,
    render_invalid_status,
    render_status,
    render_transcript,
    render_updated,
)
from helper_bot.models.category import Category
from helper_bot.models.record import RequestRecord


def _record(title: str, status: str, identifier: str = "c" * 32) -> RequestRecord:
    return RequestRecord(
        identifier=identifier,
        title=title,
        status=status,
        collection_id="a" * 32,
    )


class TestRenderStatus:
    """Status listing rendering."""

    def test_empty_bd_listing_with_hint(self) -> None:
        text = render_status([], Category.BUSINESS_DEVELOPMENT, False, "helperbot")
        assert text == (
            "*BD Requests Status:*\n\n"
            "No requests found."
            "\n_Added to CRM bd requests are hidden. "
            "Use '@helperbot status bd all' to see everything._"
        )

    def test_records_are_bulleted_in_order(self) -> None:
        records = [_record("Dark mode", "New"), _record("Export", "In Progress")]
        text = render_status(records, Category.FEATURE, True, "helperbot")
        assert text == (
            "*Feature Requests Status:*\n\n"
            "• *Dark mode* - New\n"
            "• *Export* - In Progress\n"
        )

    def test_no_hint_when_terminal_included(self) -> None:
        text = render_status([], Category.FEATURE, True, "helperbot")
        assert "hidden" not in text
        assert text.endswith("No requests found.")

    def test_feature_hint_names_terminal_status(self) -> None:
        text = render_status([_record("A", "New")], Category.FEATURE, False, "featurebot")
        assert text.endswith(
            "\n_Completed feature requests are hidden. "
            "Use '@featurebot status feature all' to see everything._"
        )

    def test_rendering_is_deterministic(self) -> None:
        records = [_record("A", "New"), _record("B", "Rejected")]
        first = render_status(records, Category.FEATURE, False, "helperbot")
        second = render_status(records, Category.FEATURE, False, "helperbot")
        assert first == second


class TestRenderMessages:
    """One-line replies."""

    def test_updated(self) -> None:
        assert (
            render_updated("Foo widget", "New", "Completed")
            == '✅ Updated status of "Foo widget" from "New" to "Completed"'
        )

    def test_invalid_status_lists_category_statuses(self) -> None:
        assert render_invalid_status("Blorp", Category.FEATURE) == (
            '❌ Invalid status: "Blorp". Valid statuses for feature are: '
            "New, In Progress, Pending Review, Completed, Rejected"
        )

    def test_created_includes_id(self) -> None:
        assert render_created(Category.BUSINESS_DEVELOPMENT, "abc") == (
            "✅ BD request saved to Notion! (ID: abc)"
        )

    def test_candidates_list_titles_and_ids(self) -> None:
        records = [_record("Foo one", "New", "1" * 32), _record("Foo two", "New", "2" * 32)]
        text = render_candidates(records, "Foo")
        assert text.startswith('Found multiple matches for "Foo".')
        assert f"• *Foo one* (ID: {'1' * 32})" in text
        assert f"• *Foo two* (ID: {'2' * 32})" in text


class TestRenderHelp:
    """Help text."""

    def test_help_lists_both_categories(self) -> None:
        text = render_help("helperbot")
        assert "@helperbot update bd [title] to [status]" in text
        assert "- Feature requests: New, In Progress, Pending Review, Completed, Rejected" in text
        assert "- BD requests: Not in CRM yet, Added to CRM" in text


class TestRenderBody:
    """Record body paragraphs."""

    def test_transcript_with_replies(self) -> None:
        text = render_transcript(
            "Ada Lovelace",
            "Please add dark mode",
            [("Grace Hopper", "+1"), ("Unknown User", "me too")],
        )
        assert text == (
            "*Original request by Ada Lovelace:*\nPlease add dark mode\n\n"
            "*Additional context from thread:*\n"
            "- Grace Hopper: +1\n"
            "- Unknown User: me too\n"
        )

    def test_transcript_without_replies(self) -> None:
        text = render_transcript("Ada", "Root", [])
        assert text == "*Original request by Ada:*\nRoot\n\n"

    def test_context_header_kept_when_replies_filtered(self) -> None:
        text = render_transcript("Ada", "Root", [], has_replies=True)
        assert text.endswith("*Additional context from thread:*\n")

    def test_footer(self) -> None:
        when = datetime(2024, 4, 5, 19, 21, 18, tzinfo=UTC)
        assert render_footer("product", when) == "Requested in #product on 2024-04-05 19:21:18 UTC"
