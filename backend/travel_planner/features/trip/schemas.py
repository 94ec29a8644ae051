"""
Trip feature: Schemas for travel context extraction and trip planning.
"""

from datetime import datetime

from pydantic import BaseModel

from travel_planner.features.timezone.schemas import AnalysisReport, CalendarEvent, TravelWindow


class TravelContext(BaseModel):
    """Where and when the user is travelling, derived from calendar or chat."""
    destination: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    purpose: str | None = None
    events: list[CalendarEvent] = []
    extracted_from_message: bool = False

    @property
    def travel_window(self) -> TravelWindow | None:
        if self.start_date is None or self.end_date is None:
            return None
        return TravelWindow(start=self.start_date, end=max(self.start_date, self.end_date))


class TripPlanRequest(BaseModel):
    """Chat message plus whatever calendar events the client already has."""
    message: str
    events: list[CalendarEvent] = []
    home_timezone: str | None = None


class TripPlanResponse(BaseModel):
    calendar_status: str
    travel_context: TravelContext
    timezone_analysis: AnalysisReport
