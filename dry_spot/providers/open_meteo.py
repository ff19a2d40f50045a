"""
Open-Meteo Forecast Provider for Dry Spot Finder

Alternative to wttr.in. Requests one forecast day of hourly
precipitation_probability and precipitation; the chance of staying dry is
100 - precipitation_probability. Open-Meteo has no place label, so
nearest_label stays empty.
"""

import logging
from typing import Any, List

from dry_spot.errors import IncompleteData
from dry_spot.evaluation import ForecastSample, HourlyRecord
from dry_spot.geo import Coordinate
from dry_spot.transport import FetchJson

logger = logging.getLogger(__name__)

OPEN_METEO_RECORDS_PER_DAY = 24


class OpenMeteoForecastClient:
    """ForecastClient backed by api.open-meteo.com."""

    name = "open-meteo"
    BASE_URL = "https://api.open-meteo.com/v1/forecast"
    records_per_day = OPEN_METEO_RECORDS_PER_DAY

    def __init__(self, fetch_json: FetchJson, timezone: str = "auto"):
        self.fetch_json = fetch_json
        self.timezone = timezone

    async def fetch(self, coordinate: Coordinate) -> ForecastSample:
        params = {
            "latitude": round(coordinate.latitude, 4),
            "longitude": round(coordinate.longitude, 4),
            "hourly": "precipitation_probability,precipitation",
            "forecast_days": 1,
            "timezone": self.timezone,
        }
        logger.debug(f"[OpenMeteoForecastClient] Request params: {params}")
        data = await self.fetch_json(self.BASE_URL, params)
        return parse_open_meteo_payload(data)


def _dryness_from_probability(value: Any) -> Any:
    # Unparsable values pass through for the evaluator to reject
    if isinstance(value, bool) or value is None:
        return value
    try:
        return 100.0 - float(value)
    except (TypeError, ValueError):
        return value


def parse_open_meteo_payload(data: Any) -> ForecastSample:
    """Convert an Open-Meteo hourly response into a ForecastSample."""
    if not isinstance(data, dict):
        raise IncompleteData(f"Open-Meteo response is not an object: {type(data).__name__}")

    hourly = data.get("hourly")
    if not isinstance(hourly, dict):
        raise IncompleteData("Open-Meteo response has no hourly block")

    times = hourly.get("time")
    probabilities = hourly.get("precipitation_probability")
    amounts = hourly.get("precipitation")
    if not all(isinstance(v, list) for v in (times, probabilities, amounts)):
        raise IncompleteData("Open-Meteo hourly block is missing series")
    if not len(times) == len(probabilities) == len(amounts):
        raise IncompleteData(
            f"Open-Meteo series lengths differ: time={len(times)}, "
            f"probability={len(probabilities)}, precipitation={len(amounts)}"
        )

    records: List[HourlyRecord] = [
        HourlyRecord(
            dryness_chance=_dryness_from_probability(prob),
            precipitation_mm=amount,
            time=t,
        )
        for t, prob, amount in zip(times, probabilities, amounts)
    ]
    return ForecastSample(hourly=records)
