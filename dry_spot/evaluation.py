"""
Site evaluation and best-site selection for Dry Spot Finder.

SiteEvaluator: reduces a day-one hourly forecast to a dryness score (mean
chance of staying dry, 0-100) and total precipitation (mm).

BestSiteSelector: ranks evaluations by dryness descending, then
precipitation ascending, keeping generation order for full ties.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from dry_spot.errors import IncompleteData
from dry_spot.geo import ORIGIN, Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourlyRecord:
    """One forecast step. Values are kept as received (often strings)."""
    dryness_chance: Any
    precipitation_mm: Any
    time: Optional[str] = None


@dataclass(frozen=True)
class ForecastSample:
    """Day-one forecast series for one coordinate."""
    hourly: List[HourlyRecord] = field(default_factory=list)
    nearest_label: str = ""


@dataclass(frozen=True)
class SiteEvaluation:
    coordinate: Coordinate
    dryness_score: float
    total_precipitation: float
    nearest_label: str = ""
    direction: str = ORIGIN
    hours: int = 0


def _to_number(value: Any, field_name: str, index: int) -> float:
    if isinstance(value, bool) or value is None:
        raise IncompleteData(f"Record {index}: {field_name} is missing or not numeric ({value!r})")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise IncompleteData(f"Record {index}: cannot parse {field_name} {value!r}") from None
    if not math.isfinite(number):
        raise IncompleteData(f"Record {index}: {field_name} is not finite ({value!r})")
    return number


def summarize_series(hourly: Sequence[HourlyRecord], window: Optional[int] = None) -> Tuple[float, float, int]:
    """
    Compute (mean dryness, total precipitation, records used) for a series.

    Args:
        hourly: Ordered forecast records
        window: Number of leading records that make up day one. None uses
            the whole series.

    Raises:
        IncompleteData: series empty, not list-shaped, shorter than the
            window, or holding unparsable / out-of-range values
    """
    if not isinstance(hourly, (list, tuple)):
        raise IncompleteData(f"Hourly series must be a list, got {type(hourly).__name__}")
    if not hourly:
        raise IncompleteData("Hourly series is empty")

    if window is not None:
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        if len(hourly) < window:
            raise IncompleteData(f"Hourly series has {len(hourly)} records, expected at least {window}")
        hourly = hourly[:window]

    dryness_total = 0.0
    precip_total = 0.0
    for i, record in enumerate(hourly):
        if not isinstance(record, HourlyRecord):
            raise IncompleteData(f"Record {i}: unexpected type {type(record).__name__}")
        dryness = _to_number(record.dryness_chance, "dryness chance", i)
        precip = _to_number(record.precipitation_mm, "precipitation", i)
        if not 0.0 <= dryness <= 100.0:
            raise IncompleteData(f"Record {i}: dryness chance {dryness} outside 0-100")
        if precip < 0.0:
            raise IncompleteData(f"Record {i}: negative precipitation {precip}")
        dryness_total += dryness
        precip_total += precip

    return dryness_total / len(hourly), precip_total, len(hourly)


def evaluate_forecast(
    sample: ForecastSample,
    coordinate: Coordinate,
    *,
    window: Optional[int] = None,
    direction: str = ORIGIN,
) -> SiteEvaluation:
    """
    Evaluate one candidate's forecast.

    Args:
        sample: Fetched forecast for the candidate
        coordinate: Where the forecast applies
        window: Records per day-one window (see summarize_series)
        direction: Candidate tag carried into the result

    Returns:
        SiteEvaluation with dryness_score and total_precipitation
    """
    if not isinstance(sample, ForecastSample):
        raise IncompleteData(f"Expected a ForecastSample, got {type(sample).__name__}")

    dryness, precip, hours = summarize_series(sample.hourly, window)
    return SiteEvaluation(
        coordinate=coordinate,
        dryness_score=dryness,
        total_precipitation=precip,
        nearest_label=sample.nearest_label or "",
        direction=direction,
        hours=hours,
    )


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _has_numeric_score(evaluation: SiteEvaluation) -> bool:
    # Both sort keys must be comparable
    return _is_finite_number(evaluation.dryness_score) and _is_finite_number(evaluation.total_precipitation)


def select_best(evaluations: Sequence[SiteEvaluation]) -> Optional[SiteEvaluation]:
    """
    Pick the driest site.

    Primary key dryness_score descending, then total_precipitation
    ascending. sorted() is stable, so fully tied entries keep their input
    order and the earliest generated candidate wins.

    Returns:
        The winning evaluation, or None when nothing usable was given
    """
    ranked = [e for e in evaluations if _has_numeric_score(e)]
    skipped = len(evaluations) - len(ranked)
    if skipped:
        logger.warning(f"[select_best] Skipped {skipped} evaluation(s) without numeric dryness and precipitation")

    if not ranked:
        logger.info("[select_best] No evaluations to rank")
        return None

    ranked = sorted(ranked, key=lambda e: (-e.dryness_score, e.total_precipitation))
    best = ranked[0]
    logger.info(
        f"[select_best] Best of {len(ranked)}: {best.direction} {best.coordinate.label()} "
        f"dryness={best.dryness_score:.1f}% precip={best.total_precipitation:.1f}mm"
    )
    return best
