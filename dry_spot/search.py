"""
Search orchestration for Dry Spot Finder.

Workflow:
1. Validate place name and radius (no network yet)
2. Geocode the place (NotFound aborts the query)
3. Generate the origin + 8 compass candidates
4. Fetch and evaluate every candidate concurrently (bounded, per-candidate
   timeout); each candidate settles into a CandidateOutcome
5. Rank the successful evaluations once and return the driest site

A failed candidate is logged and left out of the ranking. Only when all of
them fail is NoSiteFound raised.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from dry_spot.config import Settings
from dry_spot.errors import InvalidInput, NoSiteFound, NotFound
from dry_spot.evaluation import SiteEvaluation, evaluate_forecast, select_best
from dry_spot.geo import CandidatePoint, Coordinate, generate_candidates, validate_radius
from dry_spot.providers import ForecastClient, GeoResolver, OpenMeteoGeocoder, build_forecast_client
from dry_spot.resilience import ErrorType, categorize_error
from dry_spot.transport import FetchJson

logger = logging.getLogger(__name__)


@dataclass
class CandidateOutcome:
    """Result-or-error for one candidate."""
    candidate: CandidatePoint
    evaluation: Optional[SiteEvaluation] = None
    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.evaluation is not None

    @property
    def status_label(self) -> str:
        if self.ok:
            return "OK"
        return self.error_type.value.upper() if self.error_type else "FAILED"


@dataclass
class SearchResult:
    place: str
    origin: Coordinate
    radius_km: float
    candidates: List[CandidatePoint] = field(default_factory=list)
    outcomes: List[CandidateOutcome] = field(default_factory=list)
    best: Optional[SiteEvaluation] = None

    @property
    def evaluations(self) -> List[SiteEvaluation]:
        return [o.evaluation for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[CandidateOutcome]:
        return [o for o in self.outcomes if not o.ok]


class DrySpotFinder:
    """
    Finds the driest point within a radius of a place.

    Args:
        geocoder: GeoResolver for the place name
        forecast_client: ForecastClient for each candidate
        timeout_seconds: Deadline per candidate fetch
        max_concurrency: Candidates fetched at the same time
        window: Records per day-one series (None evaluates the whole series)
    """

    def __init__(
        self,
        geocoder: GeoResolver,
        forecast_client: ForecastClient,
        *,
        timeout_seconds: float = 15.0,
        max_concurrency: int = 4,
        window: Optional[int] = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        if window is not None and window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        self.geocoder = geocoder
        self.forecast_client = forecast_client
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency
        self.window = window

    @classmethod
    def from_settings(cls, settings: Settings, fetch_json: FetchJson) -> "DrySpotFinder":
        """Wire the configured geocoder and forecast source onto fetch_json."""
        forecast_client = build_forecast_client(settings.forecast_source, fetch_json)
        window = settings.forecast_window
        if window is None:
            window = getattr(forecast_client, "records_per_day", None)
        return cls(
            OpenMeteoGeocoder(fetch_json, language=settings.geocoding_language),
            forecast_client,
            timeout_seconds=settings.timeout_seconds,
            max_concurrency=settings.max_concurrency,
            window=window,
        )

    async def _evaluate_one(self, candidate: CandidatePoint, semaphore: asyncio.Semaphore) -> CandidateOutcome:
        async with semaphore:
            start = time.monotonic()
            try:
                sample = await asyncio.wait_for(
                    self.forecast_client.fetch(candidate.coordinate),
                    timeout=self.timeout_seconds,
                )
                evaluation = evaluate_forecast(
                    sample,
                    candidate.coordinate,
                    window=self.window,
                    direction=candidate.direction,
                )
            except Exception as e:
                error_type, error_msg = categorize_error(e)
                elapsed = time.monotonic() - start
                logger.warning(
                    f"[DrySpotFinder] {candidate.direction} {candidate.coordinate.label()} "
                    f"dropped: {error_type.value} - {error_msg}"
                )
                return CandidateOutcome(
                    candidate=candidate,
                    error_type=error_type,
                    error_message=error_msg,
                    elapsed_seconds=elapsed,
                )

            elapsed = time.monotonic() - start
            logger.info(
                f"[DrySpotFinder] {candidate.direction} {candidate.coordinate.label()}: "
                f"dryness={evaluation.dryness_score:.1f}% precip={evaluation.total_precipitation:.1f}mm "
                f"({elapsed:.2f}s)"
            )
            return CandidateOutcome(candidate=candidate, evaluation=evaluation, elapsed_seconds=elapsed)

    async def evaluate_candidates(self, candidates: List[CandidatePoint]) -> List[CandidateOutcome]:
        """
        Fetch and evaluate candidates concurrently.

        Returns one outcome per candidate, in candidate order. Cancelling
        the caller cancels every outstanding fetch.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(self._evaluate_one(candidate, semaphore) for candidate in candidates)
        )
        ok_count = sum(1 for o in outcomes if o.ok)
        logger.info(
            f"[DrySpotFinder] Evaluated {len(outcomes)} candidates: "
            f"{ok_count} ok, {len(outcomes) - ok_count} failed"
        )
        return list(outcomes)

    async def find_best_site(self, place: str, radius_km) -> SearchResult:
        """
        Run a full search.

        Raises:
            InvalidInput: blank place or bad radius
            NotFound: the place could not be geocoded
            FetchError: the geocoding lookup itself failed
            NoSiteFound: no candidate produced usable weather data
        """
        if not isinstance(place, str) or not place.strip():
            raise InvalidInput("Place name must not be empty")
        place = place.strip()
        radius = validate_radius(radius_km)

        logger.info(f"[DrySpotFinder] Searching {radius:g} km around {place!r}")
        origin = await self.geocoder.resolve(place)
        if origin is None:
            raise NotFound(place)

        candidates = generate_candidates(origin, radius)
        outcomes = await self.evaluate_candidates(candidates)

        best = select_best([o.evaluation for o in outcomes if o.ok])
        if best is None:
            logger.error(f"[DrySpotFinder] All {len(candidates)} candidates failed for {place!r}")
            raise NoSiteFound(place, len(candidates), outcomes)

        return SearchResult(
            place=place,
            origin=origin,
            radius_km=radius,
            candidates=candidates,
            outcomes=outcomes,
            best=best,
        )


class SearchSession:
    """
    Interactive wrapper where a new search supersedes the previous one.

    Starting a search cancels the in-flight one without waiting for it.
    Only the newest search may publish to latest / latest_error; a
    superseded search raises asyncio.CancelledError to its awaiter, whether
    it was still running, had already finished, or had failed.
    """

    def __init__(self, finder: DrySpotFinder):
        self.finder = finder
        self.generation = 0
        self.latest: Optional[SearchResult] = None
        self.latest_error: Optional[Exception] = None
        self._current: Optional[asyncio.Task] = None

    def cancel(self) -> None:
        """Abandon the in-flight search, if any."""
        if self._current is not None and not self._current.done():
            logger.info(f"[SearchSession] Cancelling search #{self.generation}")
            self._current.cancel()

    async def search(self, place: str, radius_km) -> SearchResult:
        self.cancel()
        self.generation += 1
        generation = self.generation

        task = asyncio.ensure_future(self.finder.find_best_site(place, radius_km))
        self._current = task

        try:
            result = await task
        except Exception as e:
            if generation != self.generation:
                logger.info(f"[SearchSession] Discarding stale error of search #{generation}: {e}")
                raise asyncio.CancelledError() from e
            self.latest = None
            self.latest_error = e
            raise

        if generation != self.generation:
            # Finished after a newer search started
            logger.info(f"[SearchSession] Discarding stale result of search #{generation}")
            raise asyncio.CancelledError()

        self.latest = result
        self.latest_error = None
        return result
