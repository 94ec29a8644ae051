"""Unit tests for the trip-level timezone analysis service."""

import pytest

from travel_planner.core.exceptions import (
    InvalidEventError,
    InvalidTimezoneError,
    InvalidTravelWindowError,
)
from travel_planner.features.timezone.resolver import TimezoneResolver
from travel_planner.features.timezone.schemas import (
    AlternativeAction,
    ConflictType,
    Severity,
    TravelWindow,
)
from travel_planner.features.timezone.service import (
    TimezoneAnalysisService,
    analyze_or_fallback,
    generate_recommendations,
)

WINDOW = {"start": "2025-08-30", "end": "2025-09-05"}
ALL_CLEAR = "✅ Great! No major timezone conflicts detected for your trip"


def _event(event_id: str, start: str, end: str, summary: str = "Sync", time_zone: str | None = None) -> dict:
    return {
        "id": event_id,
        "summary": summary,
        "start": {"dateTime": start, "timeZone": time_zone},
        "end": {"dateTime": end},
    }


# Sample trip to London (home = New York, EDT)
EARLY_STANDUP = _event("1", "2025-08-30T05:00:00-04:00", "2025-08-30T05:30:00-04:00", "Early morning standup")
CLIENT_PRESENTATION = _event("2", "2025-08-31T23:00:00-04:00", "2025-09-01T00:00:00-04:00", "Client presentation")
FLIGHT = _event("3", "2025-09-02T10:00:00-04:00", "2025-09-02T11:00:00-04:00", "Flight to London")
NO_CONFLICT = _event("4", "2025-09-03T10:00:00-04:00", "2025-09-03T11:00:00-04:00", "Design review")
MIDNIGHT_CALL = _event("5", "2025-09-01T21:00:00-04:00", "2025-09-01T21:30:00-04:00", "Midnight call")


class TestAnalyze:
    def setup_method(self):
        self.service = TimezoneAnalysisService()

    def test_sample_trip(self):
        result = self.service.analyze([EARLY_STANDUP, CLIENT_PRESENTATION], "London", WINDOW)

        assert result.destination_timezone == "Europe/London"
        assert result.home_timezone == "America/New_York"
        assert result.events_analyzed == 2
        assert [c.event.id for c in result.conflicts] == ["1", "2"]
        assert result.conflicts[0].conflict_type == ConflictType.BUSINESS_HOURS_CONFLICT
        assert result.conflicts[1].conflict_type == ConflictType.VERY_EARLY
        assert all(c.reschedule_options for c in result.conflicts)

    def test_empty_input(self):
        result = self.service.analyze([], "Anywhere", WINDOW)
        assert result.conflicts == []
        assert result.summary.total == 0
        assert ALL_CLEAR in result.recommendations

    def test_window_filtering(self):
        before = _event("before", "2025-08-29T19:59:00-04:00", "2025-08-29T20:30:00-04:00", "Flight")
        at_start = _event("at-start", "2025-08-30T00:00:00+00:00", "2025-08-30T00:30:00+00:00", "Flight")
        at_end = _event("at-end", "2025-09-05T00:00:00+00:00", "2025-09-05T00:30:00+00:00", "Flight")
        after = _event("after", "2025-09-05T00:00:01+00:00", "2025-09-05T00:30:00+00:00", "Flight")

        result = self.service.analyze([before, at_start, at_end, after], "London", WINDOW)

        assert result.events_analyzed == 2
        assert sorted(c.event.id for c in result.conflicts) == ["at-end", "at-start"]

    def test_severity_ordering_is_stable(self):
        result = self.service.analyze(
            [EARLY_STANDUP, FLIGHT, CLIENT_PRESENTATION, MIDNIGHT_CALL], "London", WINDOW,
        )
        assert [c.event.id for c in result.conflicts] == ["3", "5", "1", "2"]
        ranks = [c.severity.rank for c in result.conflicts]
        assert ranks == sorted(ranks, reverse=True)

    def test_at_most_one_conflict_per_event(self):
        result = self.service.analyze(
            [EARLY_STANDUP, FLIGHT, CLIENT_PRESENTATION, MIDNIGHT_CALL, NO_CONFLICT], "London", WINDOW,
        )
        ids = [c.event.id for c in result.conflicts]
        assert len(ids) == len(set(ids))
        assert "4" not in ids

    def test_travel_keyword_beats_early_hour(self):
        early_flight = _event("f", "2025-09-01T21:00:00-04:00", "2025-09-01T21:30:00-04:00", "FLIGHT BA178")
        result = self.service.analyze([early_flight], "London", WINDOW)
        assert result.conflicts[0].conflict_type == ConflictType.OVERLAPS_TRAVEL
        assert result.conflicts[0].severity == Severity.HIGH

    def test_delegate_only_on_very_early_before_four(self):
        result = self.service.analyze(
            [EARLY_STANDUP, FLIGHT, CLIENT_PRESENTATION, MIDNIGHT_CALL], "London", WINDOW,
        )
        for conflict in result.conflicts:
            actions = [o.alternative_action for o in conflict.reschedule_options]
            if AlternativeAction.DELEGATE in actions:
                assert conflict.conflict_type == ConflictType.VERY_EARLY
                assert conflict.destination_start_hour < 4
        midnight = next(c for c in result.conflicts if c.event.id == "5")
        assert AlternativeAction.DELEGATE in [o.alternative_action for o in midnight.reschedule_options]

    def test_timezone_mismatch_scenario(self):
        chicago = _event(
            "c", "2025-09-02T10:00:00-04:00", "2025-09-02T11:00:00-04:00",
            "Partner sync", time_zone="America/Chicago",
        )
        result = self.service.analyze([chicago], "Paris", WINDOW)
        conflict = result.conflicts[0]

        assert conflict.conflict_type == ConflictType.TIMEZONE_MISMATCH
        assert conflict.severity == Severity.MEDIUM
        reasons = [o.reason for o in conflict.reschedule_options if o.alternative_action is None]
        assert "Update meeting timezone settings to match destination" in reasons

    def test_unknown_destination_uses_default(self):
        result = self.service.analyze([NO_CONFLICT], "Atlantis", WINDOW)
        assert result.destination_timezone == "Europe/London"

    def test_deterministic(self):
        events = [EARLY_STANDUP, FLIGHT, CLIENT_PRESENTATION, MIDNIGHT_CALL, NO_CONFLICT]
        first = self.service.analyze(events, "Tokyo", WINDOW)
        second = self.service.analyze(events, "Tokyo", WINDOW)
        assert first.model_dump(mode="json") == second.model_dump(mode="json")

    def test_summary_counts(self):
        result = self.service.analyze(
            [EARLY_STANDUP, FLIGHT, CLIENT_PRESENTATION, MIDNIGHT_CALL], "London", WINDOW,
        )
        summary = result.summary
        assert summary.total == 4
        assert summary.by_severity[Severity.HIGH] == 2
        assert summary.by_severity[Severity.MEDIUM] == 2
        assert summary.by_severity[Severity.LOW] == 0
        assert summary.by_type[ConflictType.VERY_EARLY] == 2
        assert summary.by_type[ConflictType.OVERLAPS_TRAVEL] == 1
        assert summary.by_type[ConflictType.BUSINESS_HOURS_CONFLICT] == 1
        assert summary.by_type[ConflictType.TIMEZONE_MISMATCH] == 0

    def test_home_timezone_override(self):
        # 10:00 in Tokyo is inside business hours when Tokyo is home
        event = _event("t", "2025-09-01T10:00:00+09:00", "2025-09-01T11:00:00+09:00")
        result = self.service.analyze([event], "Singapore", WINDOW, home_timezone="Asia/Tokyo")
        assert result.home_timezone == "Asia/Tokyo"
        assert result.conflicts == []

    def test_accepts_model_instances(self):
        window = TravelWindow(start="2025-08-30", end="2025-09-05")
        result = self.service.analyze([], "London", window)
        assert result.events_analyzed == 0

    def test_result_is_plain_data(self):
        result = self.service.analyze([EARLY_STANDUP], "London", WINDOW)
        dumped = result.model_dump(mode="json")
        assert dumped["conflicts"][0]["conflict_type"] == "business_hours_conflict"
        assert dumped["summary"]["by_severity"]["medium"] == 1


class TestPerEventDegradation:
    def test_render_failure_skips_only_that_event(self, monkeypatch):
        service = TimezoneAnalysisService()
        real_detect = service.detector.detect

        def flaky_detect(event, *args):
            if event.id == "2":
                raise ValueError("cannot render")
            return real_detect(event, *args)

        monkeypatch.setattr(service.detector, "detect", flaky_detect)
        result = service.analyze([EARLY_STANDUP, CLIENT_PRESENTATION], "London", WINDOW)

        assert result.skipped_event_ids == ["2"]
        assert [c.event.id for c in result.conflicts] == ["1"]


class TestValidation:
    def setup_method(self):
        self.service = TimezoneAnalysisService()

    def test_malformed_timestamp(self):
        bad = _event("bad", "not-a-timestamp", "2025-08-30T05:30:00-04:00")
        with pytest.raises(InvalidEventError) as exc:
            self.service.analyze([bad], "London", WINDOW)
        assert "bad" in exc.value.message

    def test_start_after_end(self):
        inverted = _event("inv", "2025-08-30T06:00:00-04:00", "2025-08-30T05:00:00-04:00")
        with pytest.raises(InvalidEventError):
            self.service.analyze([inverted], "London", WINDOW)

    def test_inverted_window(self):
        with pytest.raises(InvalidTravelWindowError):
            self.service.analyze([], "London", {"start": "2025-09-05", "end": "2025-08-30"})

    def test_unknown_home_timezone(self):
        with pytest.raises(InvalidTimezoneError):
            self.service.analyze([], "London", WINDOW, home_timezone="Mars/Base")

    def test_bad_destination_mapping(self):
        service = TimezoneAnalysisService(resolver=TimezoneResolver({"atlantis": "Ocean/Atlantis"}))
        with pytest.raises(InvalidTimezoneError):
            service.analyze([], "Atlantis", WINDOW)


class TestAnalyzeOrFallback:
    def test_success(self):
        report = analyze_or_fallback(TimezoneAnalysisService(), [EARLY_STANDUP], "London", WINDOW)
        assert report.status == "success"
        assert report.result.summary.total == 1

    def test_failure_returns_raw_events(self):
        report = analyze_or_fallback(
            TimezoneAnalysisService(), [EARLY_STANDUP], "London", WINDOW, home_timezone="Mars/Base",
        )
        assert report.status == "unavailable"
        assert report.result is None
        assert "Mars/Base" in report.error
        assert report.events == [EARLY_STANDUP]

    def test_non_object_events_are_returned_as_given(self):
        report = analyze_or_fallback(TimezoneAnalysisService(), [None, "meeting at 9", 42], "London", WINDOW)
        assert report.status == "unavailable"
        assert report.error == "Invalid calendar event '?'"
        assert report.events == [None, "meeting at 9", 42]


class TestRecommendations:
    def setup_method(self):
        self.service = TimezoneAnalysisService()

    def test_no_conflicts(self):
        recommendations = generate_recommendations([], self.service.policy)
        assert recommendations == [
            ALL_CLEAR,
            "💼 Remember: Business hours are 8:30 AM - 5:00 PM in your local timezone",
        ]

    def test_many_high_severity_suggests_extending_trip(self):
        flights = [
            _event(str(i), f"2025-09-0{i}T10:00:00-04:00", f"2025-09-0{i}T11:00:00-04:00", "Flight")
            for i in range(1, 4)
        ]
        result = self.service.analyze(flights, "London", WINDOW)
        recs = result.recommendations
        assert recs[0] == "🚨 Consider extending your trip by a day to reduce scheduling conflicts"
        assert recs[1] == "⚠️ High-priority conflicts detected - review these meetings immediately"
        assert any(r.startswith("✈️") for r in recs)
        assert not any(r.startswith("✅") for r in recs)

    def test_business_hours_and_early_meetings(self):
        result = self.service.analyze(
            [EARLY_STANDUP, CLIENT_PRESENTATION, MIDNIGHT_CALL], "London", WINDOW,
        )
        recs = result.recommendations
        assert any("outside business hours (8:30 AM - 5:00 PM)" in r for r in recs)
        assert any(r.startswith("🌅 Block morning hours") for r in recs)
        assert recs[-1].startswith("💼")

    def test_few_conflicts_are_manageable(self):
        result = self.service.analyze([EARLY_STANDUP], "London", WINDOW)
        assert "✅ Only minor conflicts detected - your schedule looks manageable" in result.recommendations

    def test_late_meetings_suggest_virtual_alternatives(self):
        late = [
            _event(f"late-{day}", f"2025-09-0{day}T18:00:00-04:00", f"2025-09-0{day}T18:30:00-04:00")
            for day in (2, 3)
        ]
        result = self.service.analyze(late, "London", WINDOW)

        assert [c.conflict_type for c in result.conflicts] == [ConflictType.VERY_LATE] * 2
        assert "🌙 Suggest virtual alternatives for late evening meetings" in result.recommendations

    def test_single_late_meeting_gets_no_virtual_suggestion(self):
        late = _event("late", "2025-09-02T18:00:00-04:00", "2025-09-02T18:30:00-04:00")
        result = self.service.analyze([late], "London", WINDOW)
        assert not any(r.startswith("🌙") for r in result.recommendations)

    def test_timezone_mismatch_suggests_updating_settings(self):
        chicago = _event(
            "c", "2025-09-02T10:00:00-04:00", "2025-09-02T11:00:00-04:00",
            "Partner sync", time_zone="America/Chicago",
        )
        result = self.service.analyze([chicago], "Paris", WINDOW)
        assert "🌍 Update meeting timezone settings to match your destination timezone" in result.recommendations
