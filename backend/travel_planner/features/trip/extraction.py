"""
Trip feature: Heuristic travel-context extraction.

Two sources, tried in order by the trip router:
  1. Calendar events that look travel-related (keyword match)
  2. The user's chat message (known city + relative date phrase)

`now` is always passed in so results are reproducible.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from travel_planner.features.timezone.schemas import CalendarEvent
from travel_planner.features.trip.schemas import TravelContext

logger = logging.getLogger(__name__)

TRAVEL_EVENT_KEYWORDS = (
    "travel", "trip", "flight", "conference", "summit", "meeting",
    "visit", "vacation", "business trip", "convention", "workshop",
    "training", "seminar", "client meeting", "site visit", "demo",
    "london", "paris", "tokyo", "singapore", "new york", "berlin",
    "business", "work", "client", "project", "presentation",
)

# Checked in order, first match wins
RELATIVE_DATE_PHRASES = (
    ("next month", timedelta(days=30)),
    ("next week", timedelta(days=7)),
    ("tomorrow", timedelta(days=1)),
)

DEFAULT_DESTINATION = "London"
DEFAULT_PURPOSE = "Business meeting or conference"
DEFAULT_LEAD_TIME = timedelta(days=14)
DEFAULT_TRIP_LENGTH = timedelta(days=3)


def is_travel_event(summary: str, description: str | None = None, location: str | None = None) -> bool:
    text = f"{summary} {description or ''} {location or ''}".lower()
    return any(keyword in text for keyword in TRAVEL_EVENT_KEYWORDS)


def _display_city(city: str) -> str:
    return city.title()


def extract_destination(text: str, cities: Sequence[str]) -> str:
    """Known city mentioned in text, else the part before the first comma."""
    lowered = text.lower()
    for city in cities:
        if city.lower() in lowered:
            return _display_city(city)

    if "," in text:
        return text.split(",")[0].strip()
    return text.strip() or "Unknown"


def extract_travel_context(
    events: Iterable[CalendarEvent],
    now: datetime,
    cities: Sequence[str],
) -> TravelContext:
    """Derive the trip from the first upcoming travel-looking event.

    The trip runs from that event's start to the latest end among the travel
    events starting at or after it, so later meetings of the same trip fall
    inside the analysis window.
    """
    travel_events = [
        e for e in events if is_travel_event(e.summary, e.description, e.location)
    ]
    logger.info(f"Travel events found: {len(travel_events)}")
    if not travel_events:
        return TravelContext()

    upcoming = [e for e in travel_events if e.start.date_time > now]
    relevant = upcoming[0] if upcoming else travel_events[0]
    trip_end = max(
        e.end.date_time for e in travel_events if e.start.date_time >= relevant.start.date_time
    )

    return TravelContext(
        destination=extract_destination(relevant.location or relevant.summary, cities),
        start_date=relevant.start.date_time,
        end_date=trip_end,
        purpose=relevant.summary,
        events=travel_events,
    )


def extract_travel_from_message(
    message: str,
    now: datetime,
    cities: Sequence[str],
) -> TravelContext:
    """Fallback when the calendar has nothing: guess from the chat message."""
    lowered = message.lower()
    found_city = next((city for city in cities if city.lower() in lowered), None)

    start_date = None
    for phrase, offset in RELATIVE_DATE_PHRASES:
        if phrase in lowered:
            start_date = now + offset
            break

    if start_date is None:
        start_date = now + DEFAULT_LEAD_TIME

    return TravelContext(
        destination=_display_city(found_city) if found_city else DEFAULT_DESTINATION,
        start_date=start_date,
        end_date=start_date + DEFAULT_TRIP_LENGTH,
        purpose=DEFAULT_PURPOSE,
        events=[],
        extracted_from_message=True,
    )
