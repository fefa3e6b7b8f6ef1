"""Tests for arc-length curves: interpolation, sub-curves and projection."""

from __future__ import annotations

import math
import random

import pytest

from track_lrs.errors import OutOfRange
from track_lrs.geometry import Curve, Point

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------


def make_random_curve(n: int = 60, seed: int = 0, step: float = 10.0) -> Curve:
    """Random walk with segments of varying length and heading."""
    rng = random.Random(seed)
    x = y = 0.0
    heading = 0.0
    points = [(x, y)]
    for _ in range(n - 1):
        heading += rng.uniform(-1.2, 1.2)
        length = rng.uniform(0.1, step)
        x += length * math.cos(heading)
        y += length * math.sin(heading)
        points.append((x, y))
    return Curve(points)


@pytest.fixture
def straight() -> Curve:
    return Curve([(0, 0), (0, 10), (0, 20)])


@pytest.fixture
def elbow() -> Curve:
    """(0,0) -> (10,0) -> (10,10): east then north, length 20."""
    return Curve([(0, 0), (10, 0), (10, 10)])


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_length_is_sum_of_segments(self):
        curve = Curve([(0, 0), (3, 4), (3, 10)])
        assert curve.length == pytest.approx(11.0)

    def test_accepts_point_objects(self):
        curve = Curve([Point(0, 0), Point(1, 0)])
        assert curve.length == pytest.approx(1.0)

    def test_single_point_rejected(self):
        with pytest.raises(ValueError):
            Curve([(0, 0)])

    def test_identical_points_rejected(self):
        with pytest.raises(ValueError, match="distinct"):
            Curve([(1, 1), (1, 1), (1, 1)])

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            Curve([(0, 0), (math.nan, 1)])

    def test_consecutive_duplicates_allowed(self):
        curve = Curve([(0, 0), (5, 0), (5, 0), (10, 0)])
        assert curve.length == pytest.approx(10.0)
        assert curve.point_at(5.0) == Point(5, 0)
        assert curve.point_at(7.5) == Point(7.5, 0)

    def test_vertex_positions_are_monotonic(self):
        curve = make_random_curve(seed=3)
        positions = [curve.vertex_position(i) for i in range(len(curve))]
        assert positions[0] == 0.0
        assert positions[-1] == pytest.approx(curve.length)
        assert all(a <= b for a, b in zip(positions, positions[1:]))


# ---------------------------------------------------------------------------
# point_at / fraction
# ---------------------------------------------------------------------------


class TestPointAt:
    def test_interpolates_inside_segment(self, straight):
        assert straight.point_at(5.0) == Point(0, 5)

    def test_vertices_are_exact(self, straight):
        assert straight.point_at(0.0) == Point(0, 0)
        assert straight.point_at(10.0) == Point(0, 10)
        assert straight.point_at(20.0) == Point(0, 20)

    def test_below_zero_raises(self, straight):
        with pytest.raises(OutOfRange) as info:
            straight.point_at(-1.0)
        assert info.value.position == -1.0
        assert info.value.lower == 0.0
        assert info.value.upper == pytest.approx(20.0)

    def test_beyond_length_raises(self, straight):
        with pytest.raises(OutOfRange):
            straight.point_at(20.5)

    def test_nan_raises(self, straight):
        with pytest.raises(OutOfRange):
            straight.point_at(math.nan)

    def test_tolerance_snaps_to_ends(self, straight):
        assert straight.point_at(-1e-12) == Point(0, 0)
        assert straight.point_at(20.0 + 1e-12) == Point(0, 20)

    def test_out_of_range_is_a_value_error(self, straight):
        with pytest.raises(ValueError):
            straight.point_at(100.0)

    def test_continuous_across_vertices(self):
        curve = make_random_curve(seed=7)
        eps = 1e-7
        for i in range(1, len(curve) - 1):
            pos = curve.vertex_position(i)
            before = curve.point_at(max(pos - eps, 0.0))
            after = curve.point_at(min(pos + eps, curve.length))
            assert before.distance_to(after) <= 3 * eps

    def test_travelled_distance_matches_position(self):
        curve = make_random_curve(seed=11)
        assert curve.point_at(0).distance_to(curve.points[0]) == 0.0
        assert curve.point_at(curve.length) == curve.points[-1]

    def test_fraction(self, straight):
        assert straight.fraction(0.0) == 0.0
        assert straight.fraction(5.0) == pytest.approx(0.25)
        assert straight.fraction(20.0) == 1.0
        with pytest.raises(OutOfRange):
            straight.fraction(21.0)


# ---------------------------------------------------------------------------
# sub_curve
# ---------------------------------------------------------------------------


class TestSubCurve:
    def test_full_range_returns_original_points(self, straight):
        assert straight.sub_curve(0.0, 20.0) == [Point(0, 0), Point(0, 10), Point(0, 20)]

    def test_inner_range_keeps_inner_vertices(self, elbow):
        assert elbow.sub_curve(5.0, 15.0) == [Point(5, 0), Point(10, 0), Point(10, 5)]

    def test_range_within_one_segment(self, elbow):
        assert elbow.sub_curve(2.0, 4.0) == [Point(2, 0), Point(4, 0)]

    def test_reversed_range_is_reversed_path(self, elbow):
        forward = elbow.sub_curve(3.0, 17.0)
        backward = elbow.sub_curve(17.0, 3.0)
        assert backward == list(reversed(forward))

    def test_empty_range_is_two_equal_points(self, elbow):
        assert elbow.sub_curve(10.0, 10.0) == [Point(10, 0), Point(10, 0)]

    def test_out_of_range_raises(self, elbow):
        with pytest.raises(OutOfRange):
            elbow.sub_curve(5.0, 25.0)


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


class TestProject:
    def test_perpendicular_foot(self, straight):
        hit = straight.project((1, 5))
        assert hit.point == Point(0, 5)
        assert hit.curve_position == pytest.approx(5.0)
        assert hit.distance == pytest.approx(1.0)

    def test_offset_sign_follows_side(self, straight):
        assert straight.project((1, 5)).offset == pytest.approx(-1.0)
        assert straight.project((-2, 5)).offset == pytest.approx(2.0)

    def test_before_start_clamps_to_first_vertex(self, straight):
        hit = straight.project((0, -5))
        assert hit.point == Point(0, 0)
        assert hit.curve_position == 0.0
        assert hit.distance == pytest.approx(5.0)

    def test_point_on_curve_projects_to_itself(self):
        curve = make_random_curve(seed=5)
        for pos in (0.0, curve.length / 3, curve.length / 2, curve.length):
            p = curve.point_at(pos)
            hit = curve.project(p)
            assert hit.distance == pytest.approx(0.0, abs=1e-9)
            assert hit.point.distance_to(p) == pytest.approx(0.0, abs=1e-9)

    def test_tie_goes_to_smaller_position(self):
        # U shape: the query point is equidistant from both legs.
        curve = Curve([(0, 10), (0, 0), (10, 0), (10, 10)])
        hit = curve.project((5, 8))
        assert hit.distance == pytest.approx(5.0)
        assert hit.curve_position == pytest.approx(2.0)

    def test_far_point_still_finds_nearest(self, straight):
        hit = straight.project((1000, 1000))
        assert hit.point == Point(0, 20)

    def test_non_finite_query_rejected(self, straight):
        with pytest.raises(ValueError):
            straight.project((math.inf, 0))

    @pytest.mark.parametrize("seed", range(8))
    def test_index_matches_full_scan(self, seed):
        curve = make_random_curve(n=80, seed=seed)
        box = curve.bbox(margin=20.0)
        rng = random.Random(100 + seed)
        for _ in range(200):
            q = (rng.uniform(box.min_x, box.max_x), rng.uniform(box.min_y, box.max_y))
            fast = curve.project(q)
            slow = curve.project_full_scan(q)
            assert fast.distance == pytest.approx(slow.distance, abs=1e-12)
            assert fast.curve_position == pytest.approx(slow.curve_position, abs=1e-9)

    def test_custom_cell_size_gives_same_answer(self):
        points = make_random_curve(n=40, seed=9).points
        coarse = Curve(points, cell_size=500.0)
        fine = Curve(points, cell_size=0.5)
        rng = random.Random(1)
        for _ in range(50):
            q = (rng.uniform(-50, 150), rng.uniform(-100, 100))
            assert coarse.project(q).distance == pytest.approx(fine.project(q).distance)


# ---------------------------------------------------------------------------
# Extra geometry
# ---------------------------------------------------------------------------


class TestGeometryHelpers:
    def test_bbox(self, elbow):
        box = elbow.bbox()
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == (0, 0, 10, 10)

    def test_bbox_margin(self, elbow):
        box = elbow.bbox(margin=2.0)
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == (-2, -2, 12, 12)

    def test_normal_points_left(self, elbow):
        start, end = elbow.normal(5.0)
        assert start == Point(5, 0)
        assert end == Point(5, 1)

    def test_normal_on_second_leg(self, elbow):
        start, end = elbow.normal(15.0)
        assert start == Point(10, 5)
        assert end == Point(9, 5)

    def test_signed_offset(self, elbow):
        assert elbow.signed_offset((5, 3), 5.0) == pytest.approx(3.0)
        assert elbow.signed_offset((5, -3), 5.0) == pytest.approx(-3.0)
        assert elbow.signed_offset((5, 0), 5.0) == 0.0

    def test_intersect_segment(self, elbow):
        hit = elbow.intersect_segment((5, -5), (5, 5))
        assert hit == Point(5, 0)

    def test_intersect_returns_first_crossing_in_curve_order(self, elbow):
        forward = elbow.intersect_segment((4, -2), (14, 8))
        backward = elbow.intersect_segment((14, 8), (4, -2))
        assert forward is not None and backward is not None
        assert (forward.x, forward.y) == pytest.approx((6.0, 0.0))
        assert (backward.x, backward.y) == pytest.approx((6.0, 0.0))

    def test_intersect_miss(self, elbow):
        assert elbow.intersect_segment((20, 20), (30, 30)) is None

    def test_collinear_overlap_ignored(self, elbow):
        assert elbow.intersect_segment((2, 0), (4, 0)) is None
