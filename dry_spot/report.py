"""
Console rendering for Dry Spot Finder search results.
"""

from typing import List, Optional, Sequence

from dry_spot.evaluation import SiteEvaluation
from dry_spot.geo import Coordinate, approx_distance_km
from dry_spot.search import CandidateOutcome

NO_SITE_MESSAGE = "No suitable location found."


def render_result(
    best: Optional[SiteEvaluation],
    place: str,
    radius_km: float,
    origin: Optional[Coordinate] = None,
) -> List[str]:
    """
    Render the winning site as printable lines.

    Dryness is shown as a whole percent and precipitation with one decimal,
    coordinates with four.
    """
    if best is None:
        return [NO_SITE_MESSAGE]

    lines = [
        "Best weather found",
        f"  Origin:        {place}",
        f"  Radius:        {radius_km:g} km",
    ]
    if best.nearest_label:
        lines.append(f"  Nearest place: {best.nearest_label}")
    lines.append(f"  Coordinates:   {best.coordinate.latitude:.4f}, {best.coordinate.longitude:.4f}")
    if origin is not None:
        if best.direction == "origin":
            lines.append("  Direction:     at the origin")
        else:
            distance = approx_distance_km(origin, best.coordinate)
            lines.append(f"  Direction:     {best.direction}, ~{distance:.1f} km from the origin")
    lines.append(f"  Dry chance:    {round(best.dryness_score)}%")
    lines.append(f"  Precipitation: {best.total_precipitation:.1f} mm (day total)")
    return lines


def render_outcomes(outcomes: Sequence[CandidateOutcome]) -> List[str]:
    """One line per candidate outcome, for verbose output."""
    lines = []
    for outcome in outcomes:
        candidate = outcome.candidate
        prefix = f"  {candidate.direction:<6} {candidate.coordinate.label():<20} {outcome.status_label:<11}"
        if outcome.ok:
            ev = outcome.evaluation
            lines.append(f"{prefix} dry {ev.dryness_score:5.1f}%  precip {ev.total_precipitation:4.1f} mm")
        else:
            lines.append(f"{prefix} {outcome.error_message or ''}".rstrip())
    return lines
