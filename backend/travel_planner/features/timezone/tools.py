"""
Timezone feature: Agent tools for timezone conflict analysis.
These are LangChain @tool functions that a conversational agent can call.
"""

import json

from langchain_core.tools import tool

from travel_planner.features.timezone.service import analyze_or_fallback, get_timezone_service


@tool
def analyze_timezone_conflicts(
    events_json: str,
    destination: str,
    start_date: str,
    end_date: str,
    home_timezone: str | None = None,
) -> str:
    """Check the user's meetings for problems caused by travelling to another timezone.
    Use when the user plans a trip and asks whether their calendar still works,
    which meetings are too early/late at the destination, or how to reschedule them.

    Args:
        events_json: JSON list of calendar events. Each event has "id", "summary",
            "start": {"dateTime": RFC3339, "timeZone": optional IANA id},
            "end": {"dateTime": RFC3339}, optional "description", "location", "attendees".
        destination: Destination city, e.g. "Tokyo".
        start_date: First day of the trip, YYYY-MM-DD.
        end_date: End of the trip window, YYYY-MM-DD (read as midnight UTC, inclusive).
        home_timezone: Traveler's home IANA timezone (None = configured default).

    Returns:
        JSON with conflicts ranked by severity, reschedule options and recommendations.
        If analysis fails, status is "unavailable" and the raw events are returned.
    """
    try:
        events = json.loads(events_json)
    except json.JSONDecodeError as e:
        return json.dumps({
            "status": "unavailable",
            "error": f"events_json is not valid JSON: {e.msg}",
            "events": [],
        }, ensure_ascii=False)

    if not isinstance(events, list):
        events = [events]

    report = analyze_or_fallback(
        get_timezone_service(),
        events=events,
        destination=destination,
        travel_window={"start": start_date, "end": end_date},
        home_timezone=home_timezone,
    )
    return json.dumps(report.model_dump(mode="json"), ensure_ascii=False)


@tool
def resolve_destination_timezone(city: str) -> str:
    """Look up the IANA timezone used for a destination city.

    Args:
        city: City name, e.g. "San Francisco".

    Returns:
        JSON with the timezone and whether the city is in the known table
        (unknown cities fall back to a default zone).
    """
    resolver = get_timezone_service().resolver
    return json.dumps({
        "status": "success",
        "city": city,
        "timezone": resolver.resolve(city),
        "is_known": resolver.is_known(city),
    }, ensure_ascii=False)


# Export all tools for the agent graph
timezone_tools = [analyze_timezone_conflicts, resolve_destination_timezone]
