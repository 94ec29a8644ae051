"""
Timezone feature: Schemas for calendar events, conflicts and analysis results.

Every record here is immutable plain data so an AnalysisResult can be
serialized with model_dump(mode="json") and cross a process boundary.
"""

from datetime import datetime, date, time, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from travel_planner.config import Settings


# ── Closed tags ──────────────────────────────────────────

class ConflictType(str, Enum):
    VERY_EARLY = "very_early"
    VERY_LATE = "very_late"
    BUSINESS_HOURS_CONFLICT = "business_hours_conflict"
    TIMEZONE_MISMATCH = "timezone_mismatch"
    OVERLAPS_TRAVEL = "overlaps_travel"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


class AttendeeImpact(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


class AlternativeAction(str, Enum):
    MAKE_VIRTUAL = "make_virtual"
    DELEGATE = "delegate"
    RESCHEDULE = "reschedule"


class GoverningClock(str, Enum):
    """Which timezone's wall clock decides business hours."""
    HOME = "home"
    DESTINATION = "destination"


def format_clock(value: time) -> str:
    """8:30 AM style rendering of a time of day (no leading zero)."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


# ── Input records ────────────────────────────────────────

class EventTime(BaseModel):
    """An absolute instant plus the (optional, possibly wrong) zone label."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date_time: AwareDatetime = Field(alias="dateTime")
    time_zone: str | None = Field(default=None, alias="timeZone")


class CalendarEvent(BaseModel):
    """One scheduled occurrence pulled from an external calendar."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    summary: str
    description: str | None = None
    location: str | None = None
    start: EventTime
    end: EventTime
    attendees: list[str] = []

    @field_validator("attendees", mode="before")
    @classmethod
    def _attendee_identifiers(cls, value):
        # Google Calendar style {"email": ..., "name": ...} entries
        if value is None:
            return []
        return [item.get("email", "") if isinstance(item, dict) else item for item in value]

    @model_validator(mode="after")
    def _start_not_after_end(self):
        if self.start.date_time > self.end.date_time:
            raise ValueError(f"event '{self.id}' starts after it ends")
        return self

    @property
    def text(self) -> str:
        return f"{self.summary} {self.description or ''}"


class TravelWindow(BaseModel):
    """Trip interval. Plain dates are read as midnight UTC."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end", mode="before")
    @classmethod
    def _coerce_bound(cls, value):
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return value

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _start_not_after_end(self):
        if self.start > self.end:
            raise ValueError("travel window starts after it ends")
        return self

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


# ── Policy ───────────────────────────────────────────────

class TimezonePolicy(BaseModel):
    """Tunable thresholds for the reasoning engine."""
    model_config = ConfigDict(frozen=True)

    home_timezone: str = "America/New_York"
    business_hours_start: time = time(8, 30)
    business_hours_end: time = time(17, 0)
    governed_by: GoverningClock = GoverningClock.HOME
    early_hour_threshold: int = 6
    late_hour_threshold: int = 22
    critical_early_hour: int = 4
    critical_late_hour: int = 23  # hour > 23 never happens on a 24h clock
    early_reschedule_hour: int = 9
    late_reschedule_hour: int = 14
    default_reschedule_hour: int = 10
    travel_reschedule_hour: int = 14
    travel_keywords: tuple[str, ...] = ("flight", "airport", "travel", "departure", "arrival")

    @property
    def business_hours_range(self) -> str:
        return (
            f"{format_clock(self.business_hours_start)} - "
            f"{format_clock(self.business_hours_end)} local time"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "TimezonePolicy":
        return cls(
            home_timezone=settings.HOME_TIMEZONE,
            business_hours_start=time.fromisoformat(settings.BUSINESS_HOURS_START),
            business_hours_end=time.fromisoformat(settings.BUSINESS_HOURS_END),
            governed_by=GoverningClock(settings.BUSINESS_HOURS_GOVERNED_BY),
            early_hour_threshold=settings.EARLY_HOUR_THRESHOLD,
            late_hour_threshold=settings.LATE_HOUR_THRESHOLD,
        )


# ── Output records ───────────────────────────────────────

class BusinessHoursAnalysis(BaseModel):
    """Local renderings of an event in both zones plus the verdict."""
    model_config = ConfigDict(frozen=True)

    local_start_time: str
    local_end_time: str
    destination_start_time: str
    destination_end_time: str
    is_within_business_hours: bool
    business_hours_range: str


class RescheduleOption(BaseModel):
    """A suggested remediation; the caller picks among them."""
    model_config = ConfigDict(frozen=True)

    new_date_time: datetime
    new_time_description: str
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    attendee_impact: AttendeeImpact
    alternative_action: AlternativeAction | None = None


class TimezoneConflict(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: CalendarEvent
    conflict_type: ConflictType
    severity: Severity
    reason: str
    home_time: str
    destination_time: str
    destination_start_hour: int
    business_hours_analysis: BusinessHoursAnalysis
    reschedule_options: list[RescheduleOption] = []


class ConflictSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    by_severity: dict[Severity, int]
    by_type: dict[ConflictType, int]


class AnalysisResult(BaseModel):
    """Conflicts ranked by severity plus summary counts and recommendations."""
    model_config = ConfigDict(frozen=True)

    destination: str
    destination_timezone: str
    home_timezone: str
    events_analyzed: int
    conflicts: list[TimezoneConflict]
    summary: ConflictSummary
    recommendations: list[str]
    skipped_event_ids: list[str] = []


# ── API requests ─────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    """Request body for POST /api/timezone/analyze."""
    events: list[CalendarEvent] = []
    destination: str
    travel_window: TravelWindow
    home_timezone: str | None = None


class ResolveResponse(BaseModel):
    city: str
    timezone: str
    is_known: bool


class AnalysisReport(BaseModel):
    """Analysis outcome for callers that must never fail on this subsystem.

    status="unavailable" carries the error and the raw, unanalyzed events,
    exactly as received (they may not even be objects).
    """
    status: Literal["success", "unavailable"]
    result: AnalysisResult | None = None
    error: str | None = None
    events: list[Any] = []
