"""Rendering of replies and record bodies.

Everything here is a pure function of its arguments: no chat or store
calls, no logging. Text uses Slack mrkdwn (*bold*, _italic_).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from helper_bot.models.category import CATEGORY_PROFILES, Category, get_profile
from helper_bot.models.record import RequestRecord

NO_REQUESTS = "No requests found."
UNKNOWN_USER = "Unknown User"


def render_status(
    records: Sequence[RequestRecord],
    category: Category,
    include_terminal: bool,
    bot_name: str,
) -> str:
    """Render a status listing for one category.

    Args:
        records: Records to list, already in display order
        category: Category the records belong to
        include_terminal: Whether terminal-status records were included
        bot_name: Bot handle used in the "show all" hint

    Returns:
        Header, one bullet per record (or "No requests found."), and a hint
        when terminal records were left out.
    """
    profile = get_profile(category)
    text = f"*{profile.label} Requests Status:*\n\n"

    if not records:
        text += NO_REQUESTS
    else:
        text += "".join(f"• *{record.title}* - {record.status}\n" for record in records)

    if not include_terminal:
        text += (
            f"\n_{profile.terminal_status} {profile.key} requests are hidden. "
            f"Use '@{bot_name} status {profile.key} all' to see everything._"
        )

    return text


def render_candidates(records: Sequence[RequestRecord], query: str) -> str:
    """Ask the user to pick between several matching records."""
    lines = [f'Found multiple matches for "{query}". Please be more specific or use the ID:\n']
    lines.extend(f"• *{record.title}* (ID: {record.identifier})" for record in records)
    return "\n".join(lines)


def render_no_match(query: str, category: Category) -> str:
    return f'❌ No {get_profile(category).key} request found matching "{query}"'


def render_invalid_status(status_text: str, category: Category) -> str:
    profile = get_profile(category)
    return (
        f'❌ Invalid status: "{status_text}". '
        f"Valid statuses for {profile.key} are: {', '.join(profile.statuses)}"
    )


def render_updated(title: str, old_status: str, new_status: str) -> str:
    return f'✅ Updated status of "{title}" from "{old_status}" to "{new_status}"'


def render_created(category: Category, record_id: str) -> str:
    return f"✅ {get_profile(category).label} request saved to Notion! (ID: {record_id})"


def render_help(bot_name: str) -> str:
    """Render the command summary, including every category's statuses."""
    bot = f"@{bot_name}"
    status_lines = "\n".join(
        f"- {profile.label} requests: {', '.join(profile.statuses)}"
        for profile in CATEGORY_PROFILES.values()
    )
    return (
        "*HelperBot Commands:*\n\n"
        f"- *Create a request:* Tag {bot} in a thread to save the thread\n"
        '  - Include "bd" in your message for business development requests\n'
        "  - Otherwise it will be saved as a feature request\n\n"
        "- *Update status:*\n"
        f"  - {bot} update [feature] to [status]\n"
        f"  - {bot} update bd [title] to [status]\n\n"
        "- *Check statuses:*\n"
        f"  - {bot} status (features only)\n"
        f"  - {bot} status bd (BD requests only)\n"
        '  - Add "all" to include completed requests\n\n'
        f"- *Help:* {bot} help\n\n"
        "*Valid statuses:*\n"
        f"{status_lines}"
    )


def render_transcript(
    requester: str,
    root_text: str,
    replies: Sequence[tuple[str, str]],
    has_replies: bool | None = None,
) -> str:
    """Render the attributed thread transcript stored as the record body.

    Args:
        requester: Display name of the root message author
        root_text: Full text of the root message
        replies: (display name, text) pairs in thread order
        has_replies: Whether the thread had replies at all; defaults to
            bool(replies). The context header is shown even when every reply
            was filtered out.
    """
    text = f"*Original request by {requester}:*\n{root_text}\n\n"

    if has_replies is None:
        has_replies = bool(replies)
    if has_replies:
        text += "*Additional context from thread:*\n"
        text += "".join(f"- {name}: {reply}\n" for name, reply in replies)

    return text


def render_footer(channel_name: str, requested_at: datetime) -> str:
    return f"Requested in #{channel_name} on {requested_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"


def render_failure(prefix: str, suffix: str) -> str:
    return f"❌ {prefix}: {suffix}"


def render_unexpected(message: str) -> str:
    return f"❌ Something went wrong: {message}"
