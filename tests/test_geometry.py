"""Tests for routing geometry primitives."""

import pytest

from bpmn_layout.layout.routing.geometry import (
    Side,
    classify_side,
    dock,
    dock_between,
    elbow,
    find_clear_vertical_x,
    on_boundary,
    orthogonalize,
    separating_side,
    side_point,
)
from bpmn_layout.parser.model import Bounds

TASK = Bounds(0, 0, 100, 80)
DIAMOND = Bounds(0, 0, 60, 60)


class TestDock:
    def test_rectangle_right(self):
        assert dock(TASK, (300, 40)) == pytest.approx((100, 40))

    def test_rectangle_bottom(self):
        assert dock(TASK, (50, 300)) == pytest.approx((50, 80))

    def test_diamond_vertex(self):
        assert dock(DIAMOND, (200, 30), diamond=True) == pytest.approx((60, 30))

    def test_diamond_edge(self):
        point = dock(DIAMOND, (60, 60), diamond=True)
        assert point == (45, 45)
        assert on_boundary(DIAMOND, point, diamond=True)

    def test_zero_ray_docks_below(self):
        x, y = dock(TASK, TASK.center)
        assert x == pytest.approx(50)
        assert y == pytest.approx(80)

    def test_between(self):
        other = Bounds(200, 0, 100, 80)
        assert dock_between(TASK, other) == ((100, 40), (200, 40))


class TestSidePoint:
    def test_single_anchor_is_side_center(self):
        assert side_point(TASK, Side.RIGHT) == (100, 40)
        assert side_point(TASK, Side.TOP) == (50, 0)

    def test_spread(self):
        points = [side_point(TASK, Side.BOTTOM, i, 3) for i in range(3)]
        assert points == [(25, 80), (50, 80), (75, 80)]

    def test_spread_on_diamond_stays_on_outline(self):
        points = [side_point(DIAMOND, Side.RIGHT, i, 2, diamond=True) for i in range(2)]
        assert points[0] == pytest.approx((55, 25))
        assert points[1] == pytest.approx((55, 35))
        assert all(on_boundary(DIAMOND, p, diamond=True) for p in points)

    @pytest.mark.parametrize("total", [1, 2, 3, 4])
    def test_neighbouring_diamond_sides_never_meet(self, total):
        left = {side_point(DIAMOND, Side.LEFT, i, total, diamond=True) for i in range(total)}
        top = {side_point(DIAMOND, Side.TOP, i, total, diamond=True) for i in range(total)}
        assert not left & top


class TestSides:
    @pytest.mark.parametrize(
        "target,side",
        [
            (Bounds(200, 0, 100, 80), Side.RIGHT),
            (Bounds(-200, 0, 100, 80), Side.LEFT),
            (Bounds(0, 200, 100, 80), Side.BOTTOM),
            (Bounds(0, -200, 100, 80), Side.TOP),
        ],
    )
    def test_separating(self, target, side):
        assert separating_side(TASK, target) is side
        assert classify_side(TASK, target) is side

    def test_right_checked_before_bottom(self):
        assert separating_side(TASK, Bounds(200, 200, 100, 80)) is Side.RIGHT

    def test_below_clearance_is_not_separating(self):
        assert separating_side(TASK, Bounds(103, 0, 100, 80)) is None

    def test_overlap_falls_back_to_larger_axis(self):
        assert classify_side(TASK, Bounds(50, 10, 100, 80)) is Side.RIGHT
        assert classify_side(TASK, Bounds(10, 50, 100, 80)) is Side.BOTTOM

    def test_opposite(self):
        assert Side.RIGHT.opposite is Side.LEFT
        assert Side.TOP.opposite is Side.BOTTOM
        assert Side.LEFT.is_horizontal and not Side.BOTTOM.is_horizontal


class TestPaths:
    def test_elbow_horizontal(self):
        assert elbow((0, 0), (100, 50), horizontal=True) == [(0, 0), (50, 0), (50, 50), (100, 50)]

    def test_elbow_vertical(self):
        assert elbow((0, 0), (100, 50), horizontal=False) == [(0, 0), (0, 25), (100, 25), (100, 50)]

    def test_elbow_aligned_is_straight(self):
        assert elbow((0, 0), (0, 50), horizontal=True) == [(0, 0), (0, 50)]

    def test_orthogonalize_inserts_bend(self):
        assert orthogonalize([(0, 0), (10, 10), (10, 20)]) == [(0, 0), (10, 0), (10, 10), (10, 20)]


class TestCorridor:
    def test_clear_line_kept(self):
        assert find_clear_vertical_x(50, 0, 100, [Bounds(200, 0, 50, 50)]) == 50

    def test_shifts_past_obstacle(self):
        assert find_clear_vertical_x(100, 0, 100, [Bounds(90, 20, 20, 20)]) == 112

    def test_tries_both_directions(self):
        obstacles = [Bounds(90, 20, 40, 20)]
        assert find_clear_vertical_x(100, 0, 100, obstacles) == 88

    def test_obstacle_outside_span_ignored(self):
        assert find_clear_vertical_x(100, 0, 100, [Bounds(90, 200, 20, 20)]) == 100

    def test_keeps_x_when_nothing_is_free(self):
        assert find_clear_vertical_x(200, 0, 100, [Bounds(0, 0, 400, 100)]) == 200

    def test_reversed_span(self):
        assert find_clear_vertical_x(100, 100, 0, [Bounds(90, 20, 20, 20)]) == 112


def test_on_boundary_rejects_interior():
    assert on_boundary(TASK, (0, 40))
    assert on_boundary(TASK, (100, 80))
    assert not on_boundary(TASK, (50, 40))
    assert not on_boundary(TASK, (150, 40))
