"""
Tests for blob statistics: count, mean, min/max/range and population
standard deviation of both axes, optionally divided by the px/μm ratio.
"""

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spore_viewer.geometry import Blob, Line
from spore_viewer.statistics import EMPTY_STATISTICS, axis_lengths, compute_statistics


def _blob(a, b):
    return Blob(Line(0, 0, 0, a), Line(-b / 2, a / 2, b / 2, a / 2))


class TestComputeStatistics:

    def test_empty_collection(self):
        stats = compute_statistics([])
        assert stats is EMPTY_STATISTICS
        assert stats.is_empty
        assert stats.count == 0
        assert stats.mean_a == 0 and stats.stddev_b == 0
        assert stats.min_a == math.inf
        assert stats.max_b == -math.inf

    def test_single_blob(self):
        stats = compute_statistics([_blob(10, 6)])
        assert stats.count == 1
        assert stats.mean_a == pytest.approx(10.0)
        assert stats.mean_b == pytest.approx(6.0)
        assert stats.stddev_a == 0
        assert stats.range_a == 0
        assert stats.min_b == stats.max_b == pytest.approx(6.0)

    def test_calibration_divides_lengths(self):
        stats = compute_statistics([_blob(10, 6)], ratio=2.0)
        assert stats.mean_a == pytest.approx(5.0)
        assert stats.mean_b == pytest.approx(3.0)

    def test_population_standard_deviation(self):
        blobs = [_blob(a, 2) for a in (2, 4, 4, 4, 5, 5, 7, 9)]
        stats = compute_statistics(blobs)
        assert stats.mean_a == pytest.approx(5.0)
        assert stats.stddev_a == pytest.approx(2.0)
        assert stats.stddev_b == pytest.approx(0.0)

    def test_min_max_range(self):
        stats = compute_statistics([_blob(10, 3), _blob(14, 5), _blob(12, 4)])
        assert (stats.min_a, stats.max_a, stats.range_a) == pytest.approx((10, 14, 4))
        assert (stats.min_b, stats.max_b, stats.range_b) == pytest.approx((3, 5, 2))

    def test_order_independent(self):
        blobs = [_blob(10, 3), _blob(14, 5), _blob(12, 4)]
        assert compute_statistics(blobs) == compute_statistics(list(reversed(blobs)))

    @pytest.mark.parametrize("ratio", [0, -1.5])
    def test_non_positive_ratio_rejected(self, ratio):
        with pytest.raises(ValueError):
            compute_statistics([_blob(10, 6)], ratio=ratio)


class TestAxisLengths:

    def test_uses_line1_as_axis_a(self):
        a, b = axis_lengths([_blob(8, 2), _blob(6, 4)])
        assert list(a) == pytest.approx([8, 6])
        assert list(b) == pytest.approx([2, 4])
