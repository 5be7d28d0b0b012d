"""Unit tests for projecting points onto polylines."""

import math

import pytest

from src.route_graph_bc.geo.domain.services.polyline_projector import (
    polyline_length,
    project_on_polyline,
)
from src.route_graph_bc.geo.domain.value_objects.geo import EARTH_RADIUS_M, haversine_distance

ONE_DEGREE_M = EARTH_RADIUS_M * math.pi / 180

TOY_LINE = [[0, 0], [0, 1], [0, 2]]


class TestPolylineLength:

    def test_sums_segments(self):
        assert polyline_length(TOY_LINE) == pytest.approx(2 * ONE_DEGREE_M, rel=1e-9)

    def test_single_point_has_no_length(self):
        assert polyline_length([[0, 0]]) == 0.0


class TestProjectOnPolyline:
    """Tests for closest-segment projection and cumulative distance."""

    def test_requires_two_points(self):
        with pytest.raises(ValueError):
            project_on_polyline([[0, 0]], (0, 0))

    def test_point_beside_middle_vertex(self):
        """(0.0005, 1) projects onto the vertex shared by both segments."""
        result = project_on_polyline(TOY_LINE, (0.0005, 1))

        assert result.cum_dist == pytest.approx(ONE_DEGREE_M, rel=1e-9)
        assert result.projected_point == pytest.approx((0, 1))
        # Longitude degrees shrink by cos(lat)
        expected = 0.0005 * ONE_DEGREE_M * math.cos(math.radians(1))
        assert result.distance == pytest.approx(expected, rel=1e-6)

    def test_equal_distances_keep_first_segment(self):
        result = project_on_polyline(TOY_LINE, (0.0005, 1))
        assert result.segment_index == 0

    def test_point_on_vertex_has_accumulated_length(self):
        result = project_on_polyline(TOY_LINE, (0, 1))
        assert result.distance == 0.0
        assert result.cum_dist == pytest.approx(ONE_DEGREE_M, rel=1e-9)

    def test_point_beside_second_segment(self):
        result = project_on_polyline(TOY_LINE, (0.0002, 1.5))

        assert result.segment_index == 1
        assert result.projected_point == pytest.approx((0, 1.5))
        assert result.cum_dist == pytest.approx(1.5 * ONE_DEGREE_M, rel=1e-6)

    def test_closest_segment_wins_not_the_last(self):
        """An L-shaped line: the point is next to the first leg."""
        coords = [[0, 0], [0, 0.01], [0.01, 0.01]]
        result = project_on_polyline(coords, (0.0001, 0.002))

        assert result.segment_index == 0
        assert result.cum_dist == pytest.approx(haversine_distance((0, 0), (0, 0.002)), rel=1e-6)

    def test_point_before_start_clamps_to_zero(self):
        result = project_on_polyline(TOY_LINE, (0, -0.5))
        assert result.cum_dist == 0.0
        assert result.projected_point == pytest.approx((0, 0))

    def test_point_after_end_clamps_to_total_length(self):
        result = project_on_polyline(TOY_LINE, (0, 2.5))
        assert result.cum_dist == pytest.approx(polyline_length(TOY_LINE), rel=1e-9)

    def test_cum_dist_within_polyline_length(self):
        coords = [[-0.38, 39.47], [-0.37, 39.475], [-0.365, 39.47], [-0.36, 39.48]]
        total = polyline_length(coords)

        for lon in (-0.39, -0.375, -0.37, -0.362, -0.35):
            for lat in (39.46, 39.47, 39.474, 39.49):
                result = project_on_polyline(coords, (lon, lat))
                assert 0.0 <= result.cum_dist <= total

                # Projected point stays within the winning segment's bounding box
                a = coords[result.segment_index]
                b = coords[result.segment_index + 1]
                px, py = result.projected_point
                assert min(a[0], b[0]) - 1e-12 <= px <= max(a[0], b[0]) + 1e-12
                assert min(a[1], b[1]) - 1e-12 <= py <= max(a[1], b[1]) + 1e-12

    def test_repeated_vertex_is_harmless(self):
        """A zero-length segment in the middle must not yield NaN."""
        coords = [[0, 0], [0, 1], [0, 1], [0, 2]]
        result = project_on_polyline(coords, (0.0001, 1.2))

        assert math.isfinite(result.cum_dist)
        assert result.cum_dist == pytest.approx(1.2 * ONE_DEGREE_M, rel=1e-6)

    def test_nan_point_is_never_close(self):
        result = project_on_polyline(TOY_LINE, (math.nan, 1))
        assert result.segment_index == -1
        assert result.distance == math.inf
