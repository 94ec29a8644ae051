"""
Trip feature: Agent tools for travel context extraction.
These are LangChain @tool functions that a conversational agent can call.
"""

import json
from datetime import datetime, timezone

from langchain_core.tools import tool

from travel_planner.features.timezone.service import get_timezone_service
from travel_planner.features.trip.extraction import extract_travel_from_message


@tool
def extract_trip_details(message: str) -> str:
    """Guess destination and travel dates from what the user wrote.
    Use when the user mentions a trip ("I'm going to Tokyo next week") and no
    travel events exist in their calendar.

    Args:
        message: The user's message, verbatim.

    Returns:
        JSON with destination, start_date, end_date (ISO 8601) and purpose.
        Destination defaults to London when no known city is mentioned.
    """
    cities = get_timezone_service().resolver.known_cities
    context = extract_travel_from_message(message, datetime.now(timezone.utc), cities)

    return json.dumps({
        "status": "success",
        "destination": context.destination,
        "start_date": context.start_date.isoformat(),
        "end_date": context.end_date.isoformat(),
        "purpose": context.purpose,
        "extracted_from_message": True,
    }, ensure_ascii=False)


trip_tools = [extract_trip_details]
