"""
Tests for the geometry kernel.

Distance, segment intersection (including the collinear and parallel
branches), the perpendicular band test and the perpendicular endpoint
construction used to snap the short axis.
"""

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spore_viewer.geometry import (
    Blob, Line, Point, distance, is_between_perpendiculars, on_segment,
    orientation, perpendicular_endpoint, segment_intersection,
)


def P(x, y):
    return Point(x, y)


# ---------------------------------------------------------------------------
# Distance
# ---------------------------------------------------------------------------

class TestDistance:

    def test_axis_aligned(self):
        assert distance(P(0, 0), P(0, 10)) == pytest.approx(10.0)

    def test_diagonal(self):
        assert distance(P(0, 0), P(3, 4)) == pytest.approx(5.0)

    def test_zero_iff_coincident(self):
        assert distance(P(2.5, -1), P(2.5, -1)) == 0
        assert distance(P(2.5, -1), P(2.5, -1.0001)) > 0

    def test_line_length_non_negative(self):
        for line in [Line(0, 0, 5, 5), Line(5, 5, 0, 0), Line(-3, 2, -3, 2)]:
            assert line.length >= 0
        assert Line(1, 1, 1, 1).length == 0


# ---------------------------------------------------------------------------
# Orientation / on_segment
# ---------------------------------------------------------------------------

class TestOrientation:

    def test_collinear(self):
        assert orientation(P(0, 0), P(1, 1), P(2, 2)) == 0

    def test_opposite_turns(self):
        a = orientation(P(0, 0), P(4, 0), P(2, 2))
        b = orientation(P(0, 0), P(4, 0), P(2, -2))
        assert {a, b} == {1, -1}

    def test_on_segment_bounding_box(self):
        assert on_segment(P(2, 2), P(0, 0), P(4, 4))
        assert not on_segment(P(5, 5), P(0, 0), P(4, 4))


# ---------------------------------------------------------------------------
# Segment intersection
# ---------------------------------------------------------------------------

class TestSegmentIntersection:

    def test_crossing_diagonals(self):
        result = segment_intersection(P(0, 0), P(4, 4), P(0, 4), P(4, 0))
        assert result.intersects is True
        assert result.point.x == pytest.approx(2.0)
        assert result.point.y == pytest.approx(2.0)

    def test_axis_aligned_cross(self):
        result = segment_intersection(P(0, 0), P(0, 10), P(5, 5), P(-5, 5))
        assert result.intersects
        assert (result.point.x, result.point.y) == pytest.approx((0.0, 5.0))

    def test_disjoint(self):
        result = segment_intersection(P(0, 0), P(1, 1), P(3, 0), P(4, -1))
        assert result.intersects is False
        assert result.point is None

    def test_lines_cross_outside_segments(self):
        # the infinite lines cross at (0, 5) but the second segment stops short
        result = segment_intersection(P(0, 0), P(0, 10), P(5, 5), P(1, 5))
        assert not result.intersects

    @pytest.mark.parametrize("segments", [
        ((0, 0), (4, 4), (0, 4), (4, 0)),
        ((0, 0), (0, 10), (5, 5), (-5, 5)),
        ((0, 0), (1, 1), (3, 0), (4, -1)),
        ((1, 1), (7, 3), (2, 5), (6, -2)),
    ])
    def test_symmetric_under_swap_and_reversal(self, segments):
        a, b, c, d = (P(*s) for s in segments)
        expected = segment_intersection(a, b, c, d).intersects
        assert segment_intersection(c, d, a, b).intersects == expected
        assert segment_intersection(b, a, c, d).intersects == expected
        assert segment_intersection(a, b, d, c).intersects == expected
        assert segment_intersection(b, a, d, c).intersects == expected

    def test_endpoint_touch_returns_touching_point(self):
        # T-junction: second segment starts on the first
        result = segment_intersection(P(0, 0), P(10, 0), P(5, 0), P(5, 5))
        assert result.intersects
        assert (result.point.x, result.point.y) == pytest.approx((5.0, 0.0))

    def test_collinear_overlap_in_collinear_branch(self):
        # all orientations are zero -> collinear branch reports p2
        result = segment_intersection(P(0, 0), P(10, 0), P(5, 0), P(15, 0))
        assert result.intersects
        assert (result.point.x, result.point.y) == (5.0, 0.0)

    def test_collinear_disjoint(self):
        result = segment_intersection(P(0, 0), P(2, 0), P(5, 0), P(8, 0))
        assert not result.intersects

    def test_parallel_offset(self):
        result = segment_intersection(P(0, 0), P(10, 0), P(0, 1), P(10, 1))
        assert not result.intersects


# ---------------------------------------------------------------------------
# Perpendicular band
# ---------------------------------------------------------------------------

class TestBetweenPerpendiculars:

    def test_midpoint_is_inside(self):
        a, b = P(1, 2), P(9, 7)
        mid = P((a.x + b.x) / 2, (a.y + b.y) / 2)
        assert is_between_perpendiculars(mid, a, b)

    def test_vertical_segment(self):
        assert is_between_perpendiculars(P(0, 5), P(0, 0), P(0, 10))
        assert not is_between_perpendiculars(P(0, 20), P(0, 0), P(0, 10))
        assert not is_between_perpendiculars(P(3, -1), P(0, 0), P(0, 10))

    def test_far_sideways_still_inside(self):
        assert is_between_perpendiculars(P(1000, 5), P(0, 0), P(0, 10))

    def test_boundary_counts_as_inside(self):
        assert is_between_perpendiculars(P(7, 0), P(0, 0), P(0, 10))
        assert is_between_perpendiculars(P(7, 10), P(0, 0), P(0, 10))

    def test_diagonal_segment(self):
        assert is_between_perpendiculars(P(0, 4), P(0, 0), P(4, 4))
        assert not is_between_perpendiculars(P(-1, -2), P(0, 0), P(4, 4))

    def test_degenerate_segment_always_true(self):
        assert is_between_perpendiculars(P(100, -50), P(3, 3), P(3, 3))


# ---------------------------------------------------------------------------
# Perpendicular endpoint
# ---------------------------------------------------------------------------

class TestPerpendicularEndpoint:

    def test_snaps_to_pointer_side(self):
        axis_start, axis_end = P(0, 0), P(0, 10)
        end = perpendicular_endpoint(axis_start, axis_end, P(5, 5), P(-5, 6))
        # horizontal through the anchor, toward the pointer side, |v| long
        assert end.y == pytest.approx(5.0)
        assert end.x == pytest.approx(5 - math.hypot(10, 1))

    def test_other_side(self):
        end = perpendicular_endpoint(P(0, 0), P(0, 10), P(-5, 5), P(6, 5))
        assert (end.x, end.y) == pytest.approx((6.0, 5.0))

    def test_result_is_perpendicular(self):
        a, b = P(1, 1), P(7, 4)
        anchor = P(5, 0)
        end = perpendicular_endpoint(a, b, anchor, P(2, 6))
        dot = (b.x - a.x) * (end.x - anchor.x) + (b.y - a.y) * (end.y - anchor.y)
        assert dot == pytest.approx(0.0, abs=1e-9)
        assert distance(anchor, end) == pytest.approx(distance(anchor, P(2, 6)))

    def test_degenerate_axis_returns_pointer(self):
        end = perpendicular_endpoint(P(2, 2), P(2, 2), P(0, 0), P(3, 4))
        assert (end.x, end.y) == (3.0, 4.0)


# ---------------------------------------------------------------------------
# Blob
# ---------------------------------------------------------------------------

class TestBlob:

    def test_normalized_puts_longer_line_first(self):
        short, long_ = Line(0, 0, 0, 4), Line(-5, 2, 5, 2)
        blob = Blob.normalized(short, long_)
        assert blob.line1 == long_
        assert blob.line2 == short

    def test_normalized_copies_lines(self):
        l1, l2 = Line(0, 0, 0, 10), Line(5, 5, -5, 5)
        blob = Blob.normalized(l1, l2)
        l1.set_end(100, 100)
        assert blob.line1.length == pytest.approx(10.0)

    def test_contains_uses_both_bands(self):
        blob = Blob(Line(0, 0, 0, 10), Line(5, 5, -5, 5))
        assert blob.contains(P(1, 4))
        assert not blob.contains(P(1, 12))
        assert not blob.contains(P(8, 4))

    def test_constructor_copies_lines(self):
        line = Line(0, 0, 0, 10)
        blob = Blob(line, Line(5, 5, -5, 5))
        line.set_end(0, 1000)
        assert blob.axis_a == pytest.approx(10.0)

    def test_equal_blobs_hash_equal(self):
        a = Blob(Line(0, 0, 0, 10), Line(5, 5, -5, 5))
        b = Blob(Line(0, 0, 0, 10), Line(5, 5, -5, 5))
        assert a == b
        assert hash(a) == hash(b)

    def test_line_midpoint(self):
        line = Line(2, 4, 8, -2)
        assert (line.mid_x, line.mid_y) == (5.0, 1.0)
