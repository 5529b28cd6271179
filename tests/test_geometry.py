"""Tests for 2D helpers, element bounds and hit-testing."""
from __future__ import annotations

import math

import pytest

from canvas.rough import Drawable, Op, OpSet
from geometry import (
    distance2d,
    distance_between_point_and_segment,
    get_arrow_points,
    get_common_bounds,
    get_diamond_points,
    get_element_abs_coords,
    get_element_at_position,
    get_element_containing_position,
    get_elements_within_selection,
    hit_test,
    rotate,
)
from models import (
    Element,
    ElementType,
    UnknownElementTypeError,
    new_element,
    new_linear_element,
    new_text_element,
    set_cached_shape,
)


def rect(x, y, w, h, **style):
    return new_element(ElementType.RECTANGLE, x, y, w, h, **style)


# ---------------------------------------------------------------------------
# math2d
# ---------------------------------------------------------------------------

class TestMath2d:
    def test_rotate_quarter_turn(self):
        x, y = rotate(1, 0, 0, 0, math.pi / 2)
        assert x == pytest.approx(0, abs=1e-9)
        assert y == pytest.approx(1)

    def test_rotate_about_other_center(self):
        x, y = rotate(2, 1, 1, 1, math.pi)
        assert (x, y) == (pytest.approx(0), pytest.approx(1))

    def test_distance2d(self):
        assert distance2d(0, 0, 3, 4) == 5

    def test_distance_to_segment_interior(self):
        assert distance_between_point_and_segment(0, 5, -10, 0, 10, 0) == pytest.approx(5)

    def test_distance_to_segment_clamps_to_endpoint(self):
        assert distance_between_point_and_segment(20, 0, -10, 0, 10, 0) == pytest.approx(10)

    def test_distance_to_zero_length_segment(self):
        assert distance_between_point_and_segment(3, 4, 0, 0, 0, 0) == pytest.approx(5)


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

class TestBounds:
    def test_box_bounds(self):
        assert get_element_abs_coords(rect(10, 20, 30, 40)) == [10, 20, 40, 60]

    def test_negative_size_is_not_normalized(self):
        assert get_element_abs_coords(rect(10, 20, -5, -5)) == [10, 20, 5, 15]

    def test_linear_bounds_from_points_without_cache(self):
        line = new_linear_element(ElementType.LINE, 5, 5, points=[[0, 0], [10, -5]])
        assert get_element_abs_coords(line) == [5, 0, 15, 5]

    def test_linear_bounds_from_cached_curve(self):
        line = new_linear_element(ElementType.LINE, 0, 0, points=[[0, 0], [100, 0]])
        curve = OpSet("path", [Op("move", [0, 0]), Op("bcurveTo", [0, -30, 100, -30, 100, 0])])
        set_cached_shape(line, [Drawable("curve", [curve])])
        x1, y1, x2, y2 = get_element_abs_coords(line)
        assert (x1, x2, y2) == (pytest.approx(0), pytest.approx(100), pytest.approx(0))
        # Bezier midpoint bulges up by 3/4 of the control offset
        assert y1 == pytest.approx(-22.5)

    def test_stale_cache_falls_back_to_points(self):
        line = new_linear_element(ElementType.LINE, 0, 0, points=[[0, 0], [100, 0]])
        curve = OpSet("path", [Op("move", [0, 0]), Op("bcurveTo", [0, -30, 100, -30, 100, 0])])
        set_cached_shape(line, [Drawable("curve", [curve])])
        line.version += 1
        assert get_element_abs_coords(line) == [0, 0, 100, 0]

    def test_diamond_points(self):
        diamond = new_element(ElementType.DIAMOND, 0, 0, 100, 50)
        assert get_diamond_points(diamond) == [51, 0, 100, 26, 51, 50, 0, 26]

    def test_arrow_points(self):
        arrow = new_linear_element(ElementType.ARROW, 0, 0, points=[[0, 0], [100, 0]])
        x2, y2, x3, y3, x4, y4 = get_arrow_points(arrow)
        assert (x2, y2) == (100, 0)
        wing_x = 100 - 30 * math.cos(math.radians(20))
        wing_y = 30 * math.sin(math.radians(20))
        assert x3 == pytest.approx(wing_x)
        assert y3 == pytest.approx(wing_y)
        assert x4 == pytest.approx(wing_x)
        assert y4 == pytest.approx(-wing_y)

    def test_short_arrow_head_is_half_the_length(self):
        arrow = new_linear_element(ElementType.ARROW, 0, 0, points=[[0, 0], [20, 0]])
        _, _, x3, _, _, _ = get_arrow_points(arrow)
        assert x3 == pytest.approx(20 - 10 * math.cos(math.radians(20)))

    def test_arrow_points_zero_length_last_segment(self):
        arrow = new_linear_element(ElementType.ARROW, 0, 0, points=[[0, 0], [10, 10], [10, 10]])
        assert get_arrow_points(arrow) == [10, 10, 10, 10, 10, 10]

    def test_common_bounds(self):
        a = rect(0, 0, 10, 10)
        b = rect(20, -5, 10, 10)
        assert get_common_bounds([a, b]) == [0, -5, 30, 10]

    def test_common_bounds_empty(self):
        assert get_common_bounds([]) == [math.inf, math.inf, -math.inf, -math.inf]


# ---------------------------------------------------------------------------
# Hit-testing
# ---------------------------------------------------------------------------

class TestHitTest:
    def test_outline_rectangle_hit_near_edge_only(self):
        r = rect(0, 0, 100, 100)
        assert hit_test(r, 5, 50)
        assert not hit_test(r, 50, 50)

    def test_filled_rectangle_hit_inside(self):
        r = rect(0, 0, 100, 100, background_color="#ff0000")
        assert hit_test(r, 50, 50)
        assert hit_test(r, -5, 50)
        assert not hit_test(r, -15, 50)

    def test_ellipse_edge(self):
        e = new_element(ElementType.ELLIPSE, 0, 0, 100, 50)
        assert hit_test(e, 100, 25)
        assert not hit_test(e, 50, 20)
        assert not hit_test(e, 200, 200)

    def test_filled_ellipse_inside(self):
        e = new_element(ElementType.ELLIPSE, 0, 0, 100, 50, background_color="#00ff00")
        assert hit_test(e, 50, 20)
        assert not hit_test(e, 200, 200)

    def test_diamond_outline(self):
        d = new_element(ElementType.DIAMOND, 0, 0, 100, 100)
        assert hit_test(d, 75, 25)
        assert not hit_test(d, 50, 50)

    def test_filled_diamond(self):
        d = new_element(ElementType.DIAMOND, 0, 0, 100, 100, background_color="#0000ff")
        assert hit_test(d, 50, 50)
        assert not hit_test(d, 0, 0)

    def test_line_segments(self):
        line = new_linear_element(ElementType.LINE, 0, 0, points=[[0, 0], [100, 0], [100, 100]])
        assert hit_test(line, 50, 5)
        assert hit_test(line, 105, 50)
        assert not hit_test(line, 50, 20)

    def test_arrow_head_wings(self):
        arrow = new_linear_element(ElementType.ARROW, 0, 0, points=[[0, 0], [100, 0]])
        line = new_linear_element(ElementType.LINE, 0, 0, points=[[0, 0], [100, 0]])
        assert hit_test(arrow, 72, 18)
        assert not hit_test(line, 72, 18)

    def test_text_inclusive_box(self):
        text = new_text_element(10, 10, "hi", width=20, height=10)
        assert hit_test(text, 30, 20)
        assert not hit_test(text, 31, 20)

    def test_selection_element_never_hit(self, caplog):
        sel = new_element(ElementType.SELECTION, 0, 0, 10, 10)
        assert not hit_test(sel, 5, 5)
        assert "selection" in caplog.text

    def test_unknown_type_raises(self):
        with pytest.raises(UnknownElementTypeError):
            hit_test(Element(id="x", type="star"), 0, 0)


class TestSceneQueries:
    def test_topmost_element_wins(self):
        lower = rect(0, 0, 100, 100, background_color="#ff0000")
        upper = rect(0, 0, 100, 100, background_color="#00ff00")
        assert get_element_at_position([lower, upper], 50, 50) is upper

    def test_deleted_elements_are_skipped(self):
        lower = rect(0, 0, 100, 100, background_color="#ff0000")
        upper = rect(0, 0, 100, 100, background_color="#00ff00")
        upper.is_deleted = True
        assert get_element_at_position([lower, upper], 50, 50) is lower

    def test_nothing_hit(self):
        assert get_element_at_position([rect(0, 0, 10, 10)], 500, 500) is None

    def test_containing_position_is_strict(self):
        r = rect(0, 0, 100, 100)
        assert get_element_containing_position([r], 50, 50) is r
        assert get_element_containing_position([r], 0, 50) is None

    def test_within_selection_is_inclusive(self):
        inside = rect(10, 10, 10, 10)
        partly = rect(15, 15, 20, 20)
        gone = rect(12, 12, 2, 2)
        gone.is_deleted = True
        selection = new_element(ElementType.SELECTION, 10, 10, 10, 10)
        assert get_elements_within_selection([inside, partly, gone], selection) == [inside]

    def test_within_negative_selection(self):
        inside = rect(10, 10, 10, 10)
        selection = new_element(ElementType.SELECTION, 30, 30, -25, -25)
        assert get_elements_within_selection([inside], selection) == [inside]
