"""Tests for polygon generation, WKT and containment helpers."""

import io
import math
import random

import pytest
from shapely.wkt import loads

from geobench.config import ConfigError, Domain
from geobench.geometry import (
    generate_polygon,
    polygon_contains,
    random_point,
    ring_to_wkt,
    write_segments,
)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def domain():
    return Domain(x_min=-100, x_max=100, y_min=-100, y_max=100)


def inside(domain, x, y):
    return domain.x_min <= x <= domain.x_max and domain.y_min <= y <= domain.y_max


class TestGeneratePolygon:
    """Tests for generate_polygon function."""

    def test_vertex_count_excludes_max_points(self, domain, rng):
        """Should draw vertex counts from [min_points, max_points)."""
        counts = {
            len(generate_polygon(domain, 10, 3, 6, rng).vertices)
            for _ in range(500)
        }
        assert counts == {3, 4, 5}

    def test_single_vertex_count_scenario(self, domain, rng):
        """Should produce triangles near their center for min 3 / max 4."""
        for _ in range(200):
            polygon = generate_polygon(domain, 10, 3, 4, rng)
            assert len(polygon.vertices) == 3
            assert inside(domain, *polygon.center)
            cx, cy = polygon.center
            for x, y in polygon.vertices:
                assert math.hypot(x - cx, y - cy) <= 10 + 1e-9

    def test_ring_is_closed(self, domain, rng):
        """Should repeat the first vertex at the end of the ring."""
        polygon = generate_polygon(domain, 10, 3, 20, rng)
        ring = polygon.ring
        assert ring[0] == ring[-1]
        assert len(ring) == len(polygon.vertices) + 1

    def test_angles_are_sorted(self, domain, rng):
        """Should place vertices at non-decreasing angles."""
        for _ in range(100):
            polygon = generate_polygon(domain, 10, 3, 20, rng)
            assert list(polygon.angles) == sorted(polygon.angles)
            assert all(0 <= a < 2 * math.pi for a in polygon.angles)

    def test_vertices_on_disk_around_center(self, domain, rng):
        """Should put every vertex at distance disk_radius from the center."""
        polygon = generate_polygon(domain, 50, 3, 20, rng)
        cx, cy = polygon.center
        assert 0 <= polygon.disk_radius <= 50
        for x, y in polygon.vertices:
            assert math.hypot(x - cx, y - cy) == pytest.approx(polygon.disk_radius)

    def test_center_inside_domain(self, rng):
        """Should draw the center from the configured rectangle."""
        domain = Domain(x_min=10, x_max=20, y_min=-5, y_max=0)
        for _ in range(200):
            polygon = generate_polygon(domain, 1, 3, 5, rng)
            assert inside(domain, *polygon.center)


    def test_same_seed_same_polygon(self, domain):
        """Should be reproducible from the random source."""
        a = generate_polygon(domain, 10, 3, 20, random.Random(7))
        b = generate_polygon(domain, 10, 3, 20, random.Random(7))
        assert a == b

    def test_max_not_greater_than_min_is_config_error(self, domain, rng):
        """Should reject max_points <= min_points before generating."""
        with pytest.raises(ConfigError):
            generate_polygon(domain, 10, 5, 5, rng)
        with pytest.raises(ConfigError):
            generate_polygon(domain, 10, 6, 5, rng)

    def test_fewer_than_three_points_is_config_error(self, domain, rng):
        """Should reject polygons with fewer than three vertices."""
        with pytest.raises(ConfigError):
            generate_polygon(domain, 10, 2, 5, rng)


class TestSegments:
    """Tests for polygon edge output."""

    def test_segments_include_closing_edge(self, domain, rng):
        """Should yield one edge per vertex, the last closing the ring."""
        polygon = generate_polygon(domain, 10, 4, 5, rng)
        segments = list(polygon.segments())
        assert len(segments) == 4
        assert segments[-1] == (polygon.vertices[-1], polygon.vertices[0])

    def test_write_segments_format(self, domain, rng):
        """Should write one 'POLY: x1 y1 x2 y2' line per edge."""
        polygon = generate_polygon(domain, 10, 3, 4, rng)
        out = io.StringIO()
        write_segments(polygon, out)
        lines = out.getvalue().splitlines()
        assert len(lines) == 3
        for line in lines:
            prefix, *coords = line.split()
            assert prefix == "POLY:"
            assert len(coords) == 4
            [float(c) for c in coords]


class TestRandomPoint:
    """Tests for random_point function."""

    def test_points_inside_domain(self, rng):
        """Should stay within the rectangle."""
        domain = Domain(x_min=0, x_max=1, y_min=5, y_max=6)
        for _ in range(500):
            assert inside(domain, *random_point(domain, rng))


class TestWkt:
    """Tests for WKT formatting."""

    def test_ring_to_wkt(self):
        """Should format a closed ring as a WKT polygon."""
        wkt = ring_to_wkt([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (0.0, 0.0)])
        assert wkt == "POLYGON ((0 0, 1 0, 0 1, 0 0))"

    def test_round_trip_keeps_full_precision(self, domain, rng):
        """Should not lose precision when formatting and loading."""
        polygon = generate_polygon(domain, 10, 3, 10, rng)
        shape = loads(polygon.to_wkt())
        coords = list(shape.exterior.coords)
        assert len(coords) == len(polygon.ring)
        for (x, y), (ex, ey) in zip(coords, polygon.ring):
            assert x == pytest.approx(ex, rel=1e-12)
            assert y == pytest.approx(ey, rel=1e-12)


class TestPolygonContains:
    """Tests for polygon_contains function."""

    SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]

    def test_point_inside(self):
        """Should return 1 for points in the interior."""
        assert polygon_contains(ring_to_wkt(self.SQUARE), 5.0, 5.0) == 1

    def test_point_outside(self):
        """Should return 0 for points outside the ring."""
        wkt = ring_to_wkt(self.SQUARE)
        assert polygon_contains(wkt, 15.0, 5.0) == 0
        assert polygon_contains(wkt, 5.0, -1.0) == 0

    @pytest.mark.parametrize("x, y", [(0.0, 5.0), (10.0, 5.0), (5.0, 0.0), (5.0, 10.0), (0.0, 0.0)])
    def test_boundary_is_not_interior(self, x, y):
        """Should return 0 for points on any edge or vertex."""
        assert polygon_contains(ring_to_wkt(self.SQUARE), x, y) == 0

    def test_concave_notch(self):
        """Should handle concave rings."""
        wkt = ring_to_wkt([(0, 0), (10, 0), (10, 10), (5, 2), (0, 10), (0, 0)])
        assert polygon_contains(wkt, 5.0, 1.0) == 1
        assert polygon_contains(wkt, 5.0, 5.0) == 0

    def test_star_shaped_contains_center(self, domain, rng):
        """Should contain its own center when vertices surround it."""
        # With 64 sorted angles no gap reaches pi for this seed
        polygon = generate_polygon(domain, 10, 64, 65, rng)
        gaps = [b - a for a, b in zip(polygon.angles, polygon.angles[1:])]
        gaps.append(2 * math.pi - polygon.angles[-1] + polygon.angles[0])
        assert max(gaps) < math.pi
        assert polygon.disk_radius > 0
        assert polygon_contains(polygon.to_wkt(), *polygon.center) == 1
