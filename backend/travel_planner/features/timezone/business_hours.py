"""
Timezone feature: Local-time rendering and business-hours classification.

Display strings (12h, AM/PM) and comparison hours (24h ints) are both taken
from the same localized datetime, so they always agree.
"""

from collections.abc import Callable
from datetime import datetime, tzinfo

from travel_planner.features.timezone.schemas import (
    BusinessHoursAnalysis,
    CalendarEvent,
    GoverningClock,
    TimezonePolicy,
)


def to_local(instant: datetime, tz: tzinfo) -> datetime:
    return instant.astimezone(tz)


def render_clock(local: datetime) -> str:
    """'06:00 PM'"""
    return local.strftime("%I:%M %p")


def render_moment(local: datetime) -> str:
    """'Sat, Aug 30, 06:00 PM'"""
    return f"{local:%a, %b} {local.day}, {local:%I:%M %p}"


# ── Governing clock strategies ───────────────────────────
# Each picks the (start, end) wall-clock pair that business hours are judged on.

LocalSpan = tuple[datetime, datetime]


def _home_clock(home: LocalSpan, destination: LocalSpan) -> LocalSpan:
    return home


def _destination_clock(home: LocalSpan, destination: LocalSpan) -> LocalSpan:
    return destination


GOVERNING_CLOCKS: dict[GoverningClock, Callable[[LocalSpan, LocalSpan], LocalSpan]] = {
    GoverningClock.HOME: _home_clock,
    GoverningClock.DESTINATION: _destination_clock,
}


class BusinessHoursClassifier:
    """Decides whether an event sits inside the configured business hours.

    By default the traveler's HOME clock governs, even though conflicts are
    reported against the destination. Set policy.governed_by to
    GoverningClock.DESTINATION to judge on destination-local hours instead.
    """

    def __init__(self, policy: TimezonePolicy):
        self.policy = policy
        self._pick_span = GOVERNING_CLOCKS[policy.governed_by]

    def is_within(self, start: datetime, end: datetime) -> bool:
        """Start must be at or after the window start (minute-exact), end hour
        must not exceed the window end hour."""
        opens = self.policy.business_hours_start
        closes = self.policy.business_hours_end
        starts_in_hours = (start.hour, start.minute) >= (opens.hour, opens.minute)
        return starts_in_hours and end.hour <= closes.hour

    def classify(
        self,
        event: CalendarEvent,
        home_tz: tzinfo,
        destination_tz: tzinfo,
    ) -> BusinessHoursAnalysis:
        home_span = (
            to_local(event.start.date_time, home_tz),
            to_local(event.end.date_time, home_tz),
        )
        destination_span = (
            to_local(event.start.date_time, destination_tz),
            to_local(event.end.date_time, destination_tz),
        )
        start, end = self._pick_span(home_span, destination_span)

        return BusinessHoursAnalysis(
            local_start_time=render_clock(home_span[0]),
            local_end_time=render_clock(home_span[1]),
            destination_start_time=render_clock(destination_span[0]),
            destination_end_time=render_clock(destination_span[1]),
            is_within_business_hours=self.is_within(start, end),
            business_hours_range=self.policy.business_hours_range,
        )
