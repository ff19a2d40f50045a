"""
Error taxonomy for Dry Spot Finder.

InvalidInput and NotFound abort a query before any candidate is fetched.
FetchError and IncompleteData are absorbed per candidate by the search.
NoSiteFound is raised only after every candidate has failed.
"""


class DrySpotError(Exception):
    """Base class for all Dry Spot Finder errors."""


class InvalidInput(DrySpotError, ValueError):
    """Place name, radius or coordinate rejected before any network call."""


class NotFound(DrySpotError):
    """The geocoder returned no match for the place name."""

    def __init__(self, place: str):
        super().__init__(f"Location could not be found: {place!r}")
        self.place = place


class FetchError(DrySpotError):
    """A remote lookup failed, timed out or returned an HTTP error."""


class IncompleteData(FetchError):
    """A forecast payload was empty, malformed or held unparsable values."""


class NoSiteFound(DrySpotError):
    """Every candidate failed, so no usable weather data was obtained."""

    def __init__(self, place: str, attempted: int, outcomes=None):
        super().__init__(
            f"No usable weather data was obtained for any of the {attempted} "
            f"locations around {place!r}"
        )
        self.place = place
        self.attempted = attempted
        self.outcomes = list(outcomes or [])
