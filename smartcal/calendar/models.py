"""Pydantic models for calendar events and the AI payloads built from them.

Events arrive from the browser client (which owns them in Firestore) and are
discarded after each request. Nothing here is persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from smartcal.config import API_MAX_EVENTS, API_MAX_TEXT_LENGTH


class EventColor(str, Enum):
    """Palette the model may pick an event color from."""

    BLUE = "#3b82f6"  # Work/business (default)
    PURPLE = "#8b5cf6"  # Creative or learning
    RED = "#ef4444"  # Urgent/important
    GREEN = "#10b981"  # Health/wellness/nature
    AMBER = "#f59e0b"  # Social/fun
    PINK = "#ec4899"  # Personal/family

    @property
    def usage(self) -> str:
        return _COLOR_USAGE[self]


_COLOR_USAGE = {
    EventColor.BLUE: "default for work/business",
    EventColor.PURPLE: "for creative or learning",
    EventColor.RED: "for urgent/important",
    EventColor.GREEN: "for health/wellness/nature",
    EventColor.AMBER: "for social/fun",
    EventColor.PINK: "for personal/family",
}

DEFAULT_COLOR = EventColor.BLUE.value
PALETTE_HEX = frozenset(color.value for color in EventColor)


class CalendarEvent(BaseModel):
    """A calendar entry as sent by the client.

    start/end accept ISO-8601 strings or epoch numbers. No start < end check
    is made; the client owns event integrity.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | int | None = None
    title: str = Field(..., max_length=500)
    description: str | None = Field(default=None, max_length=API_MAX_TEXT_LENGTH)
    start: datetime
    end: datetime
    color: str | None = None
    owner_id: str | None = Field(default=None, alias="ownerId")


class SuggestionRequest(BaseModel):
    # Optional so a missing description maps to the 400 contract, not a 422
    description: str | None = Field(default=None, max_length=API_MAX_TEXT_LENGTH)


class SummaryRequest(BaseModel):
    events: list[CalendarEvent] | None = Field(default=None, max_length=API_MAX_EVENTS)


class SuggestionResult(BaseModel):
    suggestions: str
    color: str = DEFAULT_COLOR


class SummaryEvent(BaseModel):
    """One event as it appears in a rendered summary."""

    title: str
    date: str
    time: str
    description: str
    key_points: list[str] = Field(default_factory=list)


class SummaryResult(BaseModel):
    """Structured summary merged from the per-field model calls."""

    overview: str
    events: list[SummaryEvent]
    preparations: list[str]
    priorities: list[str]
