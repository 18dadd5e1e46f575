"""Tests for the price statistics engine."""

import math
import random

import pytest

from resale_estimator.stats import StatSummary, summarize

FLOAT_FIELDS = ["min", "max", "avg", "median", "p25", "p75", "avg_trimmed"]


def test_empty_series_is_all_nan():
    summary = summarize([])
    assert summary.count == 0
    for name in FLOAT_FIELDS:
        assert math.isnan(getattr(summary, name))


def test_non_finite_values_are_ignored():
    summary = summarize([float("nan"), float("inf"), 5, float("-inf"), 3])
    assert summary.count == 2
    assert summary.min == 3
    assert summary.max == 5


def test_only_non_finite_values_is_empty():
    summary = summarize([float("nan"), float("inf")])
    assert summary.count == 0
    assert math.isnan(summary.median)


def test_odd_length_series():
    summary = summarize([5, 1, 4, 2, 3])
    assert summary.count == 5
    assert summary.min == 1
    assert summary.max == 5
    assert summary.avg == 3
    assert summary.p25 == 2
    assert summary.median == 3
    assert summary.p75 == 4
    assert summary.avg_trimmed == 3


def test_quantiles_use_midpoint_of_bounding_order_statistics():
    """(n-1)*p between indices takes the midpoint, not a weighted interpolation."""
    summary = summarize([1, 2, 3, 4])
    assert summary.p25 == 1.5
    assert summary.median == 2.5
    assert summary.p75 == 3.5


def test_two_items_median():
    summary = summarize([10, 20])
    assert summary.median == 15
    assert summary.p25 == 15
    assert summary.p75 == 15


def test_trimmed_average_excludes_tukey_outliers():
    summary = summarize([10, 11, 12, 13, 100])
    assert summary.p25 == 11
    assert summary.p75 == 13
    assert summary.avg == pytest.approx(29.2)
    assert summary.avg_trimmed == pytest.approx(11.5)


def test_degenerate_fences_fall_back_to_average():
    """With iqr == 0 and no value on the fence, the trimmed set is empty."""
    summary = summarize([10, 20])
    assert summary.avg_trimmed == summary.avg == 15


def test_single_value():
    summary = summarize([7.5])
    assert summary.count == 1
    assert summary.min == summary.max == summary.median == summary.avg_trimmed == 7.5


def test_summarize_is_idempotent():
    series = [3.2, 9.99, 1.0, 4.5, 120.0, 7.25]
    assert summarize(series) == summarize(series)


def test_order_independence():
    rng = random.Random(1234)
    series = [round(rng.uniform(1, 200), 2) for _ in range(37)]
    expected = summarize(series)
    for _ in range(5):
        shuffled = series[:]
        rng.shuffle(shuffled)
        assert summarize(shuffled) == expected


@pytest.mark.parametrize("seed", range(10))
def test_ordering_and_trimmed_bounds(seed):
    rng = random.Random(seed)
    series = [rng.expovariate(0.05) for _ in range(rng.randint(1, 60))]
    summary = summarize(series)

    assert summary.count == len(series)
    assert summary.min <= summary.p25 <= summary.median <= summary.p75 <= summary.max
    assert summary.min <= summary.avg_trimmed <= summary.max


def test_trimmed_equals_average_without_outliers():
    summary = summarize([10, 11, 12, 13, 14])
    assert summary.avg_trimmed == summary.avg


def test_to_dict_serializes_nan_as_none():
    data = StatSummary.empty().to_dict()
    assert data["count"] == 0
    assert all(data[name] is None for name in FLOAT_FIELDS)

    data = summarize([1, 2, 3]).to_dict()
    assert data["median"] == 2
