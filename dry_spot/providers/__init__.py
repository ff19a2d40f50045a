"""
Providers package for Dry Spot Finder

External collaborators used by the search:

1. Open-Meteo Geocoding - place name -> coordinate (GeoResolver)
2. wttr.in - day-one 3-hourly chance of staying dry + precipitation (default)
3. Open-Meteo Forecast - day-one hourly precipitation probability + amount

All providers take an injected FetchJson callable (see dry_spot.transport).
"""

from dry_spot.errors import InvalidInput
from dry_spot.providers.base import ForecastClient, GeoResolver
from dry_spot.providers.geocoding import OpenMeteoGeocoder, parse_geocoding_payload
from dry_spot.providers.open_meteo import OpenMeteoForecastClient, parse_open_meteo_payload
from dry_spot.providers.wttr import WttrForecastClient, parse_wttr_payload
from dry_spot.transport import FetchJson

FORECAST_CLIENTS = {
    WttrForecastClient.name: WttrForecastClient,
    OpenMeteoForecastClient.name: OpenMeteoForecastClient,
}


def build_forecast_client(source: str, fetch_json: FetchJson) -> ForecastClient:
    """Instantiate the forecast client registered under source."""
    try:
        client_cls = FORECAST_CLIENTS[source]
    except KeyError:
        raise InvalidInput(
            f"Unknown forecast source {source!r} (choose from {', '.join(FORECAST_CLIENTS)})"
        ) from None
    return client_cls(fetch_json)


__all__ = [
    # Interfaces
    "ForecastClient",
    "GeoResolver",
    # Geocoding
    "OpenMeteoGeocoder",
    "parse_geocoding_payload",
    # Forecast sources
    "WttrForecastClient",
    "parse_wttr_payload",
    "OpenMeteoForecastClient",
    "parse_open_meteo_payload",
    "FORECAST_CLIENTS",
    "build_forecast_client",
]
