"""
Timezone feature: Remediation options for a detected conflict.

Options accumulate in insertion order; they are alternatives for the caller
to present, not a ranking.
"""

from datetime import datetime, time, timedelta

from travel_planner.features.timezone.business_hours import render_moment
from travel_planner.features.timezone.resolver import load_timezone
from travel_planner.features.timezone.schemas import (
    AlternativeAction,
    AttendeeImpact,
    CalendarEvent,
    ConflictType,
    RescheduleOption,
    TimezonePolicy,
    format_clock,
)

HOUR_SHIFT_TYPES = frozenset({
    ConflictType.VERY_EARLY,
    ConflictType.VERY_LATE,
    ConflictType.BUSINESS_HOURS_CONFLICT,
})

KEEP_CURRENT_TIME = "Keep current time"


class RemediationPlanner:
    """Builds reschedule / virtual / delegate options per conflict type."""

    def __init__(self, policy: TimezonePolicy):
        self.policy = policy

    def optimal_hour(self, destination_hour: int) -> int:
        if destination_hour < self.policy.early_hour_threshold:
            return self.policy.early_reschedule_hour
        if destination_hour > self.policy.late_hour_threshold:
            return self.policy.late_reschedule_hour
        return self.policy.default_reschedule_hour

    def plan(
        self,
        event: CalendarEvent,
        destination_hour: int,
        destination_timezone: str,
        conflict_type: ConflictType,
    ) -> list[RescheduleOption]:
        destination_tz = load_timezone(destination_timezone)
        local_day = event.start.date_time.astimezone(destination_tz).date()

        def at_local(day, hour: int) -> datetime:
            # DST-aware wall clock in the destination zone
            return destination_tz.localize(datetime.combine(day, time(hour)))

        options: list[RescheduleOption] = []

        if conflict_type in HOUR_SHIFT_TYPES:
            hour = self.optimal_hour(destination_hour)
            moved = at_local(local_day, hour)
            options.append(RescheduleOption(
                new_date_time=moved,
                new_time_description=render_moment(moved),
                reason=f"Move to optimal business hours ({format_clock(time(hour))}) in destination",
                confidence=0.9,
                attendee_impact=AttendeeImpact.MINIMAL,
            ))

        if conflict_type != ConflictType.OVERLAPS_TRAVEL:
            options.append(RescheduleOption(
                new_date_time=event.start.date_time,
                new_time_description=KEEP_CURRENT_TIME,
                reason="Convert to virtual meeting - join from destination",
                confidence=0.8,
                attendee_impact=AttendeeImpact.MINIMAL,
                alternative_action=AlternativeAction.MAKE_VIRTUAL,
            ))

        if conflict_type == ConflictType.OVERLAPS_TRAVEL:
            day_before = at_local(local_day - timedelta(days=1), self.policy.travel_reschedule_hour)
            options.append(RescheduleOption(
                new_date_time=day_before,
                new_time_description=render_moment(day_before),
                reason="Move to day before travel",
                confidence=0.7,
                attendee_impact=AttendeeImpact.MODERATE,
            ))

        if (
            conflict_type == ConflictType.VERY_EARLY
            and destination_hour < self.policy.critical_early_hour
        ):
            options.append(RescheduleOption(
                new_date_time=event.start.date_time,
                new_time_description=KEEP_CURRENT_TIME,
                reason="Consider delegating this very early meeting",
                confidence=0.6,
                attendee_impact=AttendeeImpact.SIGNIFICANT,
                alternative_action=AlternativeAction.DELEGATE,
            ))

        if conflict_type == ConflictType.TIMEZONE_MISMATCH:
            options.append(RescheduleOption(
                new_date_time=event.start.date_time,
                new_time_description=KEEP_CURRENT_TIME,
                reason="Update meeting timezone settings to match destination",
                confidence=0.7,
                attendee_impact=AttendeeImpact.MINIMAL,
            ))

        return options
