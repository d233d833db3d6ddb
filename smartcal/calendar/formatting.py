"""
Date formatting, prompt event blocks, and summary HTML rendering.

The HTML uses the CSS classes the dashboard stylesheet expects
(structured-summary, summary-event, summary-list, ...). All event- and
model-supplied text is escaped before it is placed in markup.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from html import escape
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from smartcal.calendar.models import CalendarEvent, SummaryEvent, SummaryResult
from smartcal.config import DISPLAY_TIMEZONE, PROMPT_DESCRIPTION_TRUNCATION, PROMPT_MAX_DESCRIPTION_CHARS
from smartcal.observability.logging import get_logger
from smartcal.utils.redaction import sanitize_for_prompt

logger = get_logger(__name__)

NO_DESCRIPTION_PROMPT = "No description"
NO_DESCRIPTION_PROVIDED = "No description provided."

UNAVAILABLE_SUMMARY_HTML = (
    '<div class="structured-summary"><p class="summary-overview">'
    "Unable to generate a summary at this time. Please try again later."
    "</p></div>"
)

_SVG_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none" '
    'stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" class="structured-summary-icon">'
)

_CALENDAR_ICON = (
    _SVG_OPEN
    + '<rect x="3" y="4" width="18" height="18" rx="2" ry="2"></rect>'
    '<line x1="16" y1="2" x2="16" y2="6"></line>'
    '<line x1="8" y1="2" x2="8" y2="6"></line>'
    '<line x1="3" y1="10" x2="21" y2="10"></line>'
    "</svg>"
)

_CLIPBOARD_ICON = (
    _SVG_OPEN
    + '<path d="M16 4h2a2 2 0 0 1 2 2v14a2 2 0 0 1-2 2H6a2 2 0 0 1-2-2V6'
    'a2 2 0 0 1 2-2h2"></path>'
    '<rect x="8" y="2" width="8" height="4" rx="1" ry="1"></rect>'
    '<path d="M9 14l2 2 4-4"></path>'
    "</svg>"
)

_CHECK_ICON = (
    _SVG_OPEN
    + '<path d="M22 11.08V12a10 10 0 1 1-5.93-9.14"></path>'
    '<polyline points="22 4 12 14.01 9 11.01"></polyline>'
    "</svg>"
)


# ============================================================================
# Dates
# ============================================================================


@lru_cache(maxsize=8)
def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown SMARTCAL_TIMEZONE %r, using UTC", name)
        return timezone.utc


def to_display_time(moment: datetime, tz_name: str = DISPLAY_TIMEZONE) -> datetime:
    """Convert to the display zone. Naive values are taken as already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(_resolve_timezone(tz_name))


def format_event_date(moment: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    """Short numeric date, e.g. 3/14/2025."""
    local = to_display_time(moment, tz_name)
    return f"{local.month}/{local.day}/{local.year}"


def format_event_time(moment: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    """12-hour clock with seconds, e.g. 2:05:00 PM."""
    local = to_display_time(moment, tz_name)
    return local.strftime("%I:%M:%S %p").lstrip("0")


def format_time_range(start: datetime, end: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    return f"{format_event_time(start, tz_name)} - {format_event_time(end, tz_name)}"


# ============================================================================
# Prompt block
# ============================================================================


def _truncate_description(description: str | None) -> str:
    if not description:
        return NO_DESCRIPTION_PROMPT
    description = sanitize_for_prompt(description, max_length=PROMPT_MAX_DESCRIPTION_CHARS)
    if len(description) > PROMPT_DESCRIPTION_TRUNCATION:
        return description[:PROMPT_DESCRIPTION_TRUNCATION] + "..."
    return description or NO_DESCRIPTION_PROMPT


def build_events_prompt(events: Iterable[CalendarEvent]) -> str:
    """Compact bulleted block embedded in every summary prompt.

    One line per event: - "<title>" on <date>: <description, max 100 chars>
    """
    lines = [
        f'- "{sanitize_for_prompt(event.title, max_length=200)}" on '
        f"{format_event_date(event.start)}: {_truncate_description(event.description)}"
        for event in events
    ]
    return "\n".join(lines)


def to_summary_event(event: CalendarEvent, key_points: Sequence[str]) -> SummaryEvent:
    return SummaryEvent(
        title=event.title,
        date=format_event_date(event.start),
        time=format_time_range(event.start, event.end),
        description=event.description or NO_DESCRIPTION_PROVIDED,
        key_points=list(key_points),
    )


# ============================================================================
# HTML
# ============================================================================


def _section_title(icon: str, label: str) -> str:
    return f'<h3 class="summary-section-title">{icon}{label}</h3>'


def _list_items(items: Iterable[str]) -> str:
    return "".join(f"<li>{escape(item)}</li>" for item in items)


def _render_event(event: SummaryEvent) -> str:
    parts = [
        '<div class="summary-event">',
        '<div class="summary-event-header">',
        f'<h4 class="summary-event-title">{escape(event.title)}</h4>',
        f'<span class="summary-event-time">{escape(event.date)} • {escape(event.time)}</span>',
        "</div>",
    ]
    if event.description:
        parts.append(f'<p class="summary-event-description">{escape(event.description)}</p>')
    if event.key_points:
        parts.append(f'<ul class="summary-event-points">{_list_items(event.key_points)}</ul>')
    parts.append("</div>")
    return "".join(parts)


def render_summary_html(data: SummaryResult) -> str:
    """Render a summary into the dashboard's fixed HTML structure.

    Sections with no content are left out.
    """
    parts = ['<div class="structured-summary">']

    if data.overview:
        parts.append(f'<p class="summary-overview">{escape(data.overview)}</p>')

    if data.events:
        parts.append('<div class="summary-events">')
        parts.append(_section_title(_CALENDAR_ICON, "Events"))
        parts.extend(_render_event(event) for event in data.events)
        parts.append("</div>")

    if data.preparations:
        parts.append('<div class="summary-preparations">')
        parts.append(_section_title(_CLIPBOARD_ICON, "Preparations"))
        parts.append(f'<ul class="summary-list">{_list_items(data.preparations)}</ul>')
        parts.append("</div>")

    if data.priorities:
        parts.append('<div class="summary-priorities">')
        parts.append(_section_title(_CHECK_ICON, "Priorities"))
        parts.append(f'<ul class="summary-list">{_list_items(data.priorities)}</ul>')
        parts.append("</div>")

    parts.append("</div>")
    return "".join(parts)
