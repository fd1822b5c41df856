"""
tests/test_bands.py
Sentiment band boundaries and CSAT defaulting.
"""

import math
from datetime import datetime, timezone

import pytest

from sentiwatch.models.bands import (
    classify_sentiment,
    classify_severity_band,
    csat_or_default,
    is_concern,
    is_issue,
    is_negative,
    is_neutral,
    is_positive,
    matches_band,
)
from sentiwatch.models.record import InteractionRecord


def _rec(sentiment=0.0, csat=None) -> InteractionRecord:
    return InteractionRecord(
        id="t-1", message="hello", sentiment=sentiment, channel="Email",
        agent="Sarah", customer="c@example.com", category="General",
        confidence=0.9, timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc),
        csat_prediction=csat,
    )


class TestThreeWayBands:
    @pytest.mark.parametrize("value,band", [
        (0.9, "positive"),
        (0.1000001, "positive"),
        (0.1, "neutral"),
        (0.0, "neutral"),
        (-0.1, "neutral"),
        (-0.1000001, "negative"),
        (-1.0, "negative"),
    ])
    def test_boundaries(self, value, band):
        assert classify_sentiment(value) == band

    @pytest.mark.parametrize("value", [-1.0, -0.5, -0.1, -0.05, 0.0, 0.1, 0.3, 1.0, 2.5])
    def test_exactly_one_band(self, value):
        hits = [is_positive(value), is_neutral(value), is_negative(value)]
        assert hits.count(True) == 1

    def test_nan_is_neutral(self):
        assert classify_sentiment(math.nan) == "neutral"

    def test_out_of_range_values_still_band(self):
        assert classify_sentiment(3.0) == "positive"
        assert classify_sentiment(-3.0) == "negative"


class TestStricterBands:
    def test_issue_is_strictly_below_minus_point_three(self):
        assert is_issue(-0.31)
        assert not is_issue(-0.3)

    def test_concern_is_strictly_below_minus_point_two(self):
        assert is_concern(-0.25)
        assert not is_concern(-0.2)

    def test_severity_bands(self):
        assert classify_severity_band(0.8) == "veryPositive"
        assert classify_severity_band(0.5) == "positive"
        assert classify_severity_band(0.0) == "neutral"
        assert classify_severity_band(-0.5) == "negative"
        assert classify_severity_band(-0.51) == "veryNegative"


class TestMatchesBand:
    def test_all_matches_everything(self):
        assert matches_band(-0.9, "all")
        assert matches_band(0.0, "all")

    def test_critical_is_below_minus_half(self):
        assert matches_band(-0.6, "critical")
        assert not matches_band(-0.5, "critical")

    def test_negative_band_includes_critical_values(self):
        assert matches_band(-0.9, "negative")


class TestCsatDefault:
    def test_missing_defaults_to_three(self):
        assert csat_or_default(_rec(csat=None)) == 3

    def test_present_value_is_kept(self):
        assert csat_or_default(_rec(csat=5)) == 5
        assert csat_or_default(_rec(csat=1)) == 1
