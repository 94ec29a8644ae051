"""
Timezone feature: Trip-level analysis service.

Flow: resolve destination zone once → filter events to the travel window →
detect conflict per event → attach reschedule options → rank by severity →
summary counts + recommendation strings.

The service is pure: no I/O, no shared mutable state, no wall-clock reads.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from travel_planner.config import get_settings
from travel_planner.core.exceptions import AppBaseError, InvalidEventError, InvalidTravelWindowError
from travel_planner.features.timezone.detector import ConflictDetector
from travel_planner.features.timezone.planner import RemediationPlanner
from travel_planner.features.timezone.resolver import TimezoneResolver, load_timezone
from travel_planner.features.timezone.schemas import (
    AnalysisReport,
    AnalysisResult,
    CalendarEvent,
    ConflictSummary,
    ConflictType,
    Severity,
    TimezoneConflict,
    TimezonePolicy,
    TravelWindow,
    format_clock,
)

logger = logging.getLogger(__name__)


def rank_conflicts(conflicts: Iterable[TimezoneConflict]) -> list[TimezoneConflict]:
    """High → medium → low; equal severities keep their input order."""
    return sorted(conflicts, key=lambda c: c.severity.rank, reverse=True)


def summarize(conflicts: list[TimezoneConflict]) -> ConflictSummary:
    by_severity = Counter(c.severity for c in conflicts)
    by_type = Counter(c.conflict_type for c in conflicts)
    return ConflictSummary(
        total=len(conflicts),
        by_severity={severity: by_severity[severity] for severity in Severity},
        by_type={conflict_type: by_type[conflict_type] for conflict_type in ConflictType},
    )


def generate_recommendations(
    conflicts: list[TimezoneConflict],
    policy: TimezonePolicy,
) -> list[str]:
    """Fixed textual rules over the conflict counts, most urgent first."""
    summary = summarize(conflicts)
    high = summary.by_severity[Severity.HIGH]
    count = summary.by_type

    opens = format_clock(policy.business_hours_start)
    closes = format_clock(policy.business_hours_end)
    recommendations: list[str] = []

    if high > 2:
        recommendations.append("🚨 Consider extending your trip by a day to reduce scheduling conflicts")
    if high > 0:
        recommendations.append("⚠️ High-priority conflicts detected - review these meetings immediately")

    if count[ConflictType.BUSINESS_HOURS_CONFLICT] > 0:
        recommendations.append(
            f"🕐 Several meetings fall outside business hours ({opens} - {closes}) - consider rescheduling"
        )
    if count[ConflictType.VERY_EARLY] > 1:
        recommendations.append(
            f"🌅 Block morning hours ({opens}-10:00 AM) for the first 2 days to adjust to timezone"
        )
    if count[ConflictType.VERY_LATE] > 1:
        recommendations.append("🌙 Suggest virtual alternatives for late evening meetings")

    if count[ConflictType.TIMEZONE_MISMATCH] > 0:
        recommendations.append("🌍 Update meeting timezone settings to match your destination timezone")
    if count[ConflictType.OVERLAPS_TRAVEL] > 0:
        recommendations.append(
            "✈️ Meetings conflict with travel time - consider moving to day before/after travel"
        )

    if not conflicts:
        recommendations.append("✅ Great! No major timezone conflicts detected for your trip")
    elif len(conflicts) <= 2:
        recommendations.append("✅ Only minor conflicts detected - your schedule looks manageable")

    recommendations.append(f"💼 Remember: Business hours are {opens} - {closes} in your local timezone")
    return recommendations


class TimezoneAnalysisService:
    """Runs the timezone reasoning engine over a whole trip."""

    def __init__(
        self,
        policy: TimezonePolicy | None = None,
        resolver: TimezoneResolver | None = None,
    ):
        self.policy = policy or TimezonePolicy()
        self.resolver = resolver or TimezoneResolver()
        self.detector = ConflictDetector(self.policy)
        self.planner = RemediationPlanner(self.policy)

    def analyze(
        self,
        events: Iterable[CalendarEvent | dict],
        destination: str,
        travel_window: TravelWindow | dict,
        home_timezone: str | None = None,
    ) -> AnalysisResult:
        """Analyze every event that starts inside the travel window.

        Raises:
            InvalidEventError: An event payload is malformed or ends before it starts.
            InvalidTravelWindowError: The window is malformed or inverted.
            InvalidTimezoneError: The home or resolved destination zone can't be loaded.
        """
        calendar_events = self._validate_events(events)
        window = self._validate_window(travel_window)

        home_timezone = home_timezone or self.policy.home_timezone
        destination_timezone = self.resolver.resolve(destination)
        load_timezone(home_timezone)
        load_timezone(destination_timezone)

        in_window = [e for e in calendar_events if window.contains(e.start.date_time)]
        logger.info(
            f"Analyzing {len(in_window)} of {len(calendar_events)} events for travel to "
            f"{destination} ({destination_timezone})"
        )

        conflicts: list[TimezoneConflict] = []
        skipped: list[str] = []
        for event in in_window:
            try:
                conflict = self.detector.detect(event, home_timezone, destination_timezone, destination)
            except (ValueError, OverflowError) as e:
                logger.warning(f"Skipping event '{event.id}': cannot render local time ({e})")
                skipped.append(event.id)
                continue

            if conflict is None:
                continue

            options = self.planner.plan(
                event,
                conflict.destination_start_hour,
                destination_timezone,
                conflict.conflict_type,
            )
            conflicts.append(conflict.model_copy(update={"reschedule_options": options}))

        ranked = rank_conflicts(conflicts)
        logger.info(f"Found {len(ranked)} timezone conflicts")

        return AnalysisResult(
            destination=destination,
            destination_timezone=destination_timezone,
            home_timezone=home_timezone,
            events_analyzed=len(in_window),
            conflicts=ranked,
            summary=summarize(ranked),
            recommendations=generate_recommendations(ranked, self.policy),
            skipped_event_ids=skipped,
        )

    @staticmethod
    def _validate_events(events: Iterable[CalendarEvent | dict]) -> list[CalendarEvent]:
        validated = []
        for raw in events:
            if isinstance(raw, CalendarEvent):
                validated.append(raw)
                continue
            try:
                validated.append(CalendarEvent.model_validate(raw))
            except ValidationError as e:
                event_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
                raise InvalidEventError(f"Invalid calendar event '{event_id}'", detail=str(e))
        return validated

    @staticmethod
    def _validate_window(travel_window: TravelWindow | dict) -> TravelWindow:
        if isinstance(travel_window, TravelWindow):
            return travel_window
        try:
            return TravelWindow.model_validate(travel_window)
        except ValidationError as e:
            raise InvalidTravelWindowError(detail=str(e))


def analyze_or_fallback(
    service: TimezoneAnalysisService,
    events: list[CalendarEvent | Any],
    destination: str,
    travel_window: TravelWindow | dict,
    home_timezone: str | None = None,
) -> AnalysisReport:
    """Run the analysis; on failure return the raw events instead of raising."""
    try:
        result = service.analyze(events, destination, travel_window, home_timezone)
    except AppBaseError as e:
        logger.warning(f"Timezone analysis unavailable: {e.message} ({e.detail})")
        raw_events = [
            event.model_dump(mode="json", by_alias=True) if isinstance(event, CalendarEvent) else event
            for event in events
        ]
        return AnalysisReport(status="unavailable", error=e.message, events=raw_events)
    return AnalysisReport(status="success", result=result)


@lru_cache
def get_timezone_service() -> TimezoneAnalysisService:
    """Service configured from settings (singleton)."""
    settings = get_settings()
    return TimezoneAnalysisService(
        policy=TimezonePolicy.from_settings(settings),
        resolver=TimezoneResolver(default_timezone=settings.DEFAULT_DESTINATION_TIMEZONE),
    )
