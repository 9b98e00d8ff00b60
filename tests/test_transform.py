"""
Tests for the view transform (image <-> canvas coordinates).
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spore_viewer.transform import ViewTransform


class TestViewTransform:

    def test_identity(self):
        t = ViewTransform.identity()
        assert t.apply(3, 4) == (3.0, 4.0)
        p = t.to_image_space(3, 4)
        assert (p.x, p.y) == pytest.approx((3.0, 4.0))

    def test_coefficients_order(self):
        t = ViewTransform(2, 0, 0, 3, 10, 20)
        assert t.coefficients == (2, 0, 0, 3, 10, 20)
        assert t.apply(1, 1) == (12.0, 23.0)

    def test_inverse_round_trip(self):
        t = ViewTransform(1.5, 0.2, -0.3, 0.8, 40, -12)
        x, y = t.apply(7, -3)
        p = t.to_image_space(x, y)
        assert (p.x, p.y) == pytest.approx((7.0, -3.0))

    def test_singular_matrix(self):
        with pytest.raises(ValueError):
            ViewTransform(0, 0, 0, 0, 5, 5).invert()

    def test_fit_centers_image(self):
        t = ViewTransform.fit(400, 200, 800, 600)
        assert t.zoom == pytest.approx(2.0)
        assert t.apply(0, 0) == pytest.approx((0.0, 100.0))
        assert t.apply(400, 200) == pytest.approx((800.0, 500.0))

    def test_fit_rejects_empty_image(self):
        with pytest.raises(ValueError):
            ViewTransform.fit(0, 100, 800, 600)

    def test_compose_applies_right_first(self):
        scale = ViewTransform().scale(2)
        shift = ViewTransform().translate(10, 0)
        assert scale.compose(shift).apply(1, 0) == pytest.approx((22.0, 0.0))
        assert shift.compose(scale).apply(1, 0) == pytest.approx((12.0, 0.0))

    def test_zoom_at_keeps_anchor_fixed(self):
        t = ViewTransform(1.5, 0, 0, 1.5, 30, 40)
        before = t.to_image_space(200, 150)
        zoomed = t.zoom_at(200, 150, 1.1)
        after = zoomed.to_image_space(200, 150)
        assert (after.x, after.y) == pytest.approx((before.x, before.y))
        assert zoomed.zoom == pytest.approx(1.65)

    def test_equality_is_tolerant(self):
        assert ViewTransform(1, 0, 0, 1, 0, 0) == ViewTransform(1 + 1e-12, 0, 0, 1, 0, 0)
        assert ViewTransform(1, 0, 0, 1, 0, 0) != ViewTransform(2, 0, 0, 1, 0, 0)
