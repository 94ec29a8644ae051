"""
Timezone feature: API routes for conflict analysis.
"""

from fastapi import APIRouter, Depends

from travel_planner.core.exceptions import AppBaseError, app_error_to_http
from travel_planner.features.timezone.schemas import AnalysisResult, AnalyzeRequest, ResolveResponse
from travel_planner.features.timezone.service import TimezoneAnalysisService, get_timezone_service

router = APIRouter()


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_conflicts(
    data: AnalyzeRequest,
    service: TimezoneAnalysisService = Depends(get_timezone_service),
):
    """Detect and rank timezone conflicts for events inside the travel window."""
    try:
        return service.analyze(
            events=data.events,
            destination=data.destination,
            travel_window=data.travel_window,
            home_timezone=data.home_timezone,
        )
    except AppBaseError as e:
        raise app_error_to_http(e)


@router.get("/resolve", response_model=ResolveResponse)
async def resolve_city(
    city: str,
    service: TimezoneAnalysisService = Depends(get_timezone_service),
):
    """Look up the IANA timezone used for a destination name."""
    resolver = service.resolver
    return ResolveResponse(
        city=city,
        timezone=resolver.resolve(city),
        is_known=resolver.is_known(city),
    )
