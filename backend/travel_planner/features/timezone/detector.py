"""
Timezone feature: Per-event conflict detection.

Rules run in a fixed order and every matching rule overwrites the previous
outcome, so the emitted conflict type is the LAST rule that matched:

  1. business_hours    -> very_early | very_late | business_hours_conflict
  2. timezone_mismatch -> timezone_mismatch (medium)
  3. travel_keywords   -> overlaps_travel (high)
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from travel_planner.features.timezone.business_hours import (
    BusinessHoursClassifier,
    render_moment,
    to_local,
)
from travel_planner.features.timezone.resolver import load_timezone
from travel_planner.features.timezone.schemas import (
    BusinessHoursAnalysis,
    CalendarEvent,
    ConflictType,
    Severity,
    TimezoneConflict,
    TimezonePolicy,
)


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may look at for one event."""
    event: CalendarEvent
    policy: TimezonePolicy
    analysis: BusinessHoursAnalysis
    destination: str
    destination_timezone: str
    destination_hour: int
    destination_time: str


@dataclass(frozen=True)
class RuleOutcome:
    conflict_type: ConflictType
    severity: Severity
    reason: str


@dataclass(frozen=True)
class ConflictRule:
    name: str
    evaluate: Callable[[RuleContext], RuleOutcome | None]


def business_hours_rule(ctx: RuleContext) -> RuleOutcome | None:
    if ctx.analysis.is_within_business_hours:
        return None

    hour = ctx.destination_hour
    policy = ctx.policy
    where = f"Meeting at {ctx.destination_time} in {ctx.destination}"

    if hour < policy.early_hour_threshold:
        return RuleOutcome(
            conflict_type=ConflictType.VERY_EARLY,
            severity=Severity.HIGH if hour < policy.critical_early_hour else Severity.MEDIUM,
            reason=f"{where} is very early ({hour}:00) - outside business hours",
        )
    if hour > policy.late_hour_threshold:
        return RuleOutcome(
            conflict_type=ConflictType.VERY_LATE,
            severity=Severity.HIGH if hour > policy.critical_late_hour else Severity.MEDIUM,
            reason=f"{where} is very late ({hour}:00) - outside business hours",
        )
    return RuleOutcome(
        conflict_type=ConflictType.BUSINESS_HOURS_CONFLICT,
        severity=Severity.MEDIUM,
        reason=f"{where} is outside business hours ({ctx.analysis.business_hours_range})",
    )


def timezone_mismatch_rule(ctx: RuleContext) -> RuleOutcome | None:
    label = ctx.event.start.time_zone
    if not label or label == ctx.destination_timezone:
        return None
    return RuleOutcome(
        conflict_type=ConflictType.TIMEZONE_MISMATCH,
        severity=Severity.MEDIUM,
        reason=(
            f"Meeting timezone ({label}) doesn't match "
            f"destination timezone ({ctx.destination_timezone})"
        ),
    )


def travel_keyword_rule(ctx: RuleContext) -> RuleOutcome | None:
    text = ctx.event.text.lower()
    if not any(keyword in text for keyword in ctx.policy.travel_keywords):
        return None
    return RuleOutcome(
        conflict_type=ConflictType.OVERLAPS_TRAVEL,
        severity=Severity.HIGH,
        reason=f"Meeting conflicts with travel time to {ctx.destination}",
    )


DEFAULT_RULES: tuple[ConflictRule, ...] = (
    ConflictRule("business_hours", business_hours_rule),
    ConflictRule("timezone_mismatch", timezone_mismatch_rule),
    ConflictRule("travel_keywords", travel_keyword_rule),
)


def apply_rules(rules: Sequence[ConflictRule], ctx: RuleContext) -> RuleOutcome | None:
    """Evaluate every rule in order, keeping the last match."""
    outcome = None
    for rule in rules:
        matched = rule.evaluate(ctx)
        if matched is not None:
            outcome = matched
    return outcome


class ConflictDetector:
    """Produces at most one TimezoneConflict per event (without options)."""

    def __init__(
        self,
        policy: TimezonePolicy,
        rules: Sequence[ConflictRule] = DEFAULT_RULES,
    ):
        self.policy = policy
        self.rules = tuple(rules)
        self.classifier = BusinessHoursClassifier(policy)

    def detect(
        self,
        event: CalendarEvent,
        home_timezone: str,
        destination_timezone: str,
        destination: str,
    ) -> TimezoneConflict | None:
        home_tz = load_timezone(home_timezone)
        destination_tz = load_timezone(destination_timezone)

        destination_start = to_local(event.start.date_time, destination_tz)
        home_start = to_local(event.start.date_time, home_tz)
        analysis = self.classifier.classify(event, home_tz, destination_tz)

        ctx = RuleContext(
            event=event,
            policy=self.policy,
            analysis=analysis,
            destination=destination,
            destination_timezone=destination_timezone,
            destination_hour=destination_start.hour,
            destination_time=render_moment(destination_start),
        )
        outcome = apply_rules(self.rules, ctx)
        if outcome is None:
            return None

        return TimezoneConflict(
            event=event,
            conflict_type=outcome.conflict_type,
            severity=outcome.severity,
            reason=outcome.reason,
            home_time=render_moment(home_start),
            destination_time=ctx.destination_time,
            destination_start_hour=ctx.destination_hour,
            business_hours_analysis=analysis,
        )
