"""
Timezone feature: City name → IANA timezone resolution.

The default table is a best-effort approximation: any city not listed
resolves to the default zone, which is never correct for that city.
"""

import logging
from collections.abc import Mapping
from datetime import tzinfo
from types import MappingProxyType

import pytz

from travel_planner.core.exceptions import InvalidTimezoneError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/London"

DEFAULT_CITY_TIMEZONES: Mapping[str, str] = MappingProxyType({
    "london": "Europe/London",
    "new york": "America/New_York",
    "san francisco": "America/Los_Angeles",
    "tokyo": "Asia/Tokyo",
    "singapore": "Asia/Singapore",
    "paris": "Europe/Paris",
    "berlin": "Europe/Berlin",
    "sydney": "Australia/Sydney",
    "dubai": "Asia/Dubai",
    "amsterdam": "Europe/Amsterdam",
})


def load_timezone(name: str) -> tzinfo:
    """Load an IANA zone via pytz, raising InvalidTimezoneError on failure."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(name)


class TimezoneResolver:
    """Maps free-text destination names to IANA timezone identifiers."""

    def __init__(
        self,
        city_timezones: Mapping[str, str] = DEFAULT_CITY_TIMEZONES,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self.city_timezones = MappingProxyType(
            {city.strip().lower(): tz for city, tz in city_timezones.items()}
        )
        self.default_timezone = default_timezone

    @property
    def known_cities(self) -> list[str]:
        return list(self.city_timezones)

    def is_known(self, city: str) -> bool:
        return city.strip().lower() in self.city_timezones

    def resolve(self, city: str) -> str:
        """Resolve a city name; unknown names fall back to the default zone."""
        key = city.strip().lower()
        tz_name = self.city_timezones.get(key)
        if tz_name is None:
            logger.info(f"No timezone mapping for '{city}', using {self.default_timezone}")
            return self.default_timezone
        return tz_name
