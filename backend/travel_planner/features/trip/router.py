"""
Trip feature: API route that turns a chat message + calendar into a trip plan.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from travel_planner.features.timezone.service import (
    TimezoneAnalysisService,
    analyze_or_fallback,
    get_timezone_service,
)
from travel_planner.features.trip.extraction import (
    extract_travel_context,
    extract_travel_from_message,
)
from travel_planner.features.trip.schemas import TripPlanRequest, TripPlanResponse

router = APIRouter()


@router.post("/plan", response_model=TripPlanResponse)
async def plan_trip(
    data: TripPlanRequest,
    service: TimezoneAnalysisService = Depends(get_timezone_service),
):
    """Build the travel context, then flag timezone conflicts for it.

    Timezone analysis failures never fail this endpoint: the response carries
    status="unavailable" and the raw events instead.
    """
    now = datetime.now(timezone.utc)
    cities = service.resolver.known_cities

    context = extract_travel_context(data.events, now, cities)
    if context.events:
        calendar_status = f"Found {len(context.events)} travel events"
    else:
        context = extract_travel_from_message(data.message, now, cities)
        calendar_status = "No travel events found, extracted from message"

    report = analyze_or_fallback(
        service,
        events=data.events,
        destination=context.destination,
        travel_window=context.travel_window,
        home_timezone=data.home_timezone,
    )
    return TripPlanResponse(
        calendar_status=calendar_status,
        travel_context=context,
        timezone_analysis=report,
    )
