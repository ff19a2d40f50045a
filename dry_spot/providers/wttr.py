"""
wttr.in Forecast Provider for Dry Spot Finder

Fetches the j1 JSON format from wttr.in. The first entry of "weather" is
today; its "hourly" list holds eight three-hourly steps, each with
"chanceofremdry" (%) and "precipMM" (mm) as strings.
"""

import logging
from typing import Any, List

from dry_spot.errors import IncompleteData
from dry_spot.evaluation import ForecastSample, HourlyRecord
from dry_spot.geo import Coordinate
from dry_spot.transport import FetchJson

logger = logging.getLogger(__name__)

# wttr.in reports day one as 8 x 3-hour steps
WTTR_RECORDS_PER_DAY = 8


class WttrForecastClient:
    """ForecastClient backed by wttr.in."""

    name = "wttr"
    BASE_URL = "https://wttr.in/{lat:.4f},{lon:.4f}"
    records_per_day = WTTR_RECORDS_PER_DAY

    def __init__(self, fetch_json: FetchJson):
        self.fetch_json = fetch_json

    async def fetch(self, coordinate: Coordinate) -> ForecastSample:
        """
        Fetch day-one forecast for coordinate.

        Raises:
            FetchError: transport failure
            IncompleteData: payload lacks weather[0].hourly
        """
        url = self.BASE_URL.format(lat=coordinate.latitude, lon=coordinate.longitude)
        logger.debug(f"[WttrForecastClient] Fetching {coordinate.label()}")
        data = await self.fetch_json(url, {"format": "j1"})
        sample = parse_wttr_payload(data)
        logger.debug(
            f"[WttrForecastClient] {coordinate.label()}: {len(sample.hourly)} records"
            + (f", near {sample.nearest_label}" if sample.nearest_label else "")
        )
        return sample


def _nearest_area_name(data: dict) -> str:
    areas = data.get("nearest_area")
    if not isinstance(areas, list) or not areas or not isinstance(areas[0], dict):
        return ""
    names = areas[0].get("areaName")
    if not isinstance(names, list) or not names or not isinstance(names[0], dict):
        return ""
    value = names[0].get("value")
    return value.strip() if isinstance(value, str) else ""


def parse_wttr_payload(data: Any) -> ForecastSample:
    """Convert a wttr.in j1 response into a ForecastSample."""
    if not isinstance(data, dict):
        raise IncompleteData(f"wttr.in response is not an object: {type(data).__name__}")

    weather = data.get("weather")
    today = weather[0] if isinstance(weather, list) and weather else None
    hourly = today.get("hourly") if isinstance(today, dict) else None
    if not isinstance(hourly, list):
        raise IncompleteData("Incomplete weather data received (no weather[0].hourly list)")

    records: List[HourlyRecord] = []
    for i, step in enumerate(hourly):
        if not isinstance(step, dict):
            raise IncompleteData(f"wttr.in hourly step {i} is not an object")
        records.append(
            HourlyRecord(
                dryness_chance=step.get("chanceofremdry"),
                precipitation_mm=step.get("precipMM"),
                time=step.get("time"),
            )
        )

    return ForecastSample(hourly=records, nearest_label=_nearest_area_name(data))
