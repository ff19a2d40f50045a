"""
Tests for the SiteEvaluator (evaluate_forecast / summarize_series)
and the BestSiteSelector (select_best).

Run with: python -m pytest tests/test_evaluation.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dry_spot.errors import IncompleteData
from dry_spot.evaluation import (
    ForecastSample,
    HourlyRecord,
    SiteEvaluation,
    evaluate_forecast,
    select_best,
    summarize_series,
)
from dry_spot.geo import Coordinate

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

HERE = Coordinate(52.52, 13.405)


def records(*pairs):
    return [HourlyRecord(dryness_chance=d, precipitation_mm=p) for d, p in pairs]


def site(dryness, precip, direction="origin", lat=52.52):
    return SiteEvaluation(
        coordinate=Coordinate(lat, 13.405),
        dryness_score=dryness,
        total_precipitation=precip,
        direction=direction,
    )


class TestSiteEvaluator:

    def test_mean_dryness_and_total_precipitation(self):
        sample = ForecastSample(
            hourly=records(("80", "0.5"), ("60", "1.0"), ("100", "0.0")),
            nearest_label="Mitte",
        )
        evaluation = evaluate_forecast(sample, HERE, direction="NE")
        logger.info(f"[TEST] Evaluation: {evaluation}")

        assert evaluation.dryness_score == pytest.approx(80.0)
        assert evaluation.total_precipitation == pytest.approx(1.5)
        assert evaluation.nearest_label == "Mitte"
        assert evaluation.direction == "NE"
        assert evaluation.coordinate == HERE
        assert evaluation.hours == 3

    def test_numeric_values_accepted(self):
        dryness, precip, hours = summarize_series(records((90, 0), (70.5, 2.25)))
        assert dryness == pytest.approx(80.25)
        assert precip == pytest.approx(2.25)
        assert hours == 2

    def test_idempotent(self):
        sample = ForecastSample(hourly=records(("93", "0.1"), ("41", "3.4"), ("77", "0.0")))
        first = evaluate_forecast(sample, HERE)
        second = evaluate_forecast(sample, HERE)
        assert first == second

    @pytest.mark.parametrize("bad", ["abc", "", None, "nan", "inf", True, [1]])
    def test_unparsable_dryness_is_fatal(self, bad):
        with pytest.raises(IncompleteData):
            summarize_series(records(("80", "0.0"), (bad, "0.0")))

    @pytest.mark.parametrize("bad", ["n/a", "", None, "-0.5"])
    def test_unparsable_precipitation_is_fatal(self, bad):
        with pytest.raises(IncompleteData):
            summarize_series(records(("80", bad)))

    @pytest.mark.parametrize("dryness", ["101", "-1"])
    def test_dryness_out_of_range(self, dryness):
        with pytest.raises(IncompleteData, match="outside 0-100"):
            summarize_series(records((dryness, "0")))

    def test_empty_series(self):
        with pytest.raises(IncompleteData, match="empty"):
            evaluate_forecast(ForecastSample(hourly=[]), HERE)

    @pytest.mark.parametrize("hourly", [None, {"0": {}}, "80,0.5"])
    def test_series_not_list_shaped(self, hourly):
        with pytest.raises(IncompleteData):
            evaluate_forecast(ForecastSample(hourly=hourly), HERE)

    def test_raw_dict_records_rejected(self):
        with pytest.raises(IncompleteData, match="unexpected type"):
            summarize_series([{"chanceofremdry": "80", "precipMM": "0"}])

    def test_not_a_sample(self):
        with pytest.raises(IncompleteData):
            evaluate_forecast({"hourly": []}, HERE)


class TestForecastWindow:

    def test_window_uses_leading_records(self):
        hourly = records(*([("100", "0")] * 8 + [("0", "10")] * 2))
        dryness, precip, hours = summarize_series(hourly, window=8)
        assert dryness == 100.0
        assert precip == 0.0
        assert hours == 8

    def test_without_window_whole_series_counts(self):
        hourly = records(*([("100", "0")] * 8 + [("0", "10")] * 2))
        dryness, precip, hours = summarize_series(hourly)
        assert dryness == pytest.approx(80.0)
        assert precip == pytest.approx(20.0)
        assert hours == 10

    def test_short_series_rejected(self):
        with pytest.raises(IncompleteData, match="expected at least 24"):
            summarize_series(records(*([("50", "0")] * 8)), window=24)

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            summarize_series(records(("50", "0")), window=0)

    def test_window_passed_through_evaluate(self):
        sample = ForecastSample(hourly=records(("20", "1"), ("40", "1"), ("90", "9")))
        evaluation = evaluate_forecast(sample, HERE, window=2)
        assert evaluation.dryness_score == pytest.approx(30.0)
        assert evaluation.total_precipitation == pytest.approx(2.0)
        assert evaluation.hours == 2


class TestBestSiteSelector:

    def test_highest_dryness_wins(self):
        best = select_best([site(60, 0.0), site(85, 4.0), site(70, 0.0)])
        assert best.dryness_score == 85

    def test_lower_precipitation_breaks_dryness_tie(self):
        a = site(80, 1.2, direction="E")
        b = site(80, 0.5, direction="SW")
        assert select_best([a, b]) is b
        assert select_best([b, a]) is b

    def test_full_tie_keeps_first_listed(self):
        first = site(75, 0.3, direction="N", lat=52.6)
        second = site(75, 0.3, direction="S", lat=52.4)
        assert select_best([first, second]) is first
        assert select_best([second, first]) is second

    def test_empty_returns_none(self):
        assert select_best([]) is None

    def test_non_numeric_scores_never_selected(self):
        nan_site = site(float("nan"), 0.0, direction="N")
        none_site = site(None, 0.0, direction="E")
        real = site(10, 5.0, direction="S")
        assert select_best([nan_site, none_site, real]) is real
        assert select_best([nan_site, none_site]) is None

    @pytest.mark.parametrize("precip", [None, float("nan"), "0.5"])
    def test_non_numeric_precipitation_never_selected(self, precip):
        broken = site(90, precip, direction="N")
        real = site(90, 1.0, direction="S")
        assert select_best([broken, real]) is real
        assert select_best([broken]) is None

    def test_input_not_mutated(self):
        evaluations = [site(10, 0), site(90, 0), site(50, 0)]
        snapshot = list(evaluations)
        select_best(evaluations)
        assert evaluations == snapshot


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
