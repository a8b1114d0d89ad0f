"""
Synthetic polygon generation and the containment function used by the store.

Polygons are star-shaped around a random center: vertices are placed on a
circle at sorted random angles, so consecutive edges never cross.
"""

import math
import random
from dataclasses import dataclass
from typing import Iterator, Sequence, TextIO

import shapely
from shapely.wkt import loads

from geobench.config import Domain, validate_point_range


Point = tuple[float, float]

_default_rng = random.Random()


@dataclass(frozen=True)
class Polygon:
    """A generated polygon plus the parameters it was generated from."""
    center: Point
    disk_radius: float
    angles: tuple[float, ...]
    vertices: tuple[Point, ...]

    @property
    def ring(self) -> tuple[Point, ...]:
        """Vertices followed by the first vertex again."""
        return self.vertices + self.vertices[:1]

    def segments(self) -> Iterator[tuple[Point, Point]]:
        """Edges of the ring, closing edge last."""
        n = len(self.vertices)
        for i in range(1, n):
            yield self.vertices[i - 1], self.vertices[i]
        yield self.vertices[n - 1], self.vertices[0]

    def to_wkt(self) -> str:
        return ring_to_wkt(self.ring)


# =============================================================================
# Generation
# =============================================================================

def random_point(domain: Domain, rng: random.Random) -> Point:
    """Uniform point inside the domain rectangle."""
    x = domain.x_min + rng.random() * (domain.x_max - domain.x_min)
    y = domain.y_min + rng.random() * (domain.y_max - domain.y_min)
    return x, y


def generate_polygon(
    domain: Domain,
    radius: float,
    min_points: int,
    max_points: int,
    rng: random.Random | None = None,
) -> Polygon:
    """Generate a random star-shaped polygon inside the domain.

    Args:
        domain: Rectangle the polygon center is drawn from
        radius: Upper bound for the distance between center and vertices
        min_points: Smallest vertex count (inclusive)
        max_points: Largest vertex count (exclusive)
        rng: Random source (default: a shared module-level Random)

    Returns:
        Polygon with between min_points and max_points - 1 vertices
    """
    validate_point_range(min_points, max_points)
    rng = rng or _default_rng

    center = random_point(domain, rng)
    d = rng.random() * radius
    n = min_points + rng.randrange(max_points - min_points)

    # Sorting is what keeps the ring from crossing itself
    angles = sorted(rng.random() * 2 * math.pi for _ in range(n))

    cx, cy = center
    vertices = tuple((cx + d * math.sin(a), cy + d * math.cos(a)) for a in angles)

    return Polygon(
        center=center,
        disk_radius=d,
        angles=tuple(angles),
        vertices=vertices,
    )


def write_segments(polygon: Polygon, out: TextIO) -> None:
    """Write each edge as 'POLY: x1 y1 x2 y2' for external plotting."""
    for (x1, y1), (x2, y2) in polygon.segments():
        out.write(f"POLY: {x1!r} {y1!r} {x2!r} {y2!r}\n")


# =============================================================================
# WKT & Containment
# =============================================================================

def ring_to_wkt(ring: Sequence[Point]) -> str:
    """Format a closed ring as WKT at full float precision."""
    return shapely.to_wkt(shapely.Polygon(ring), rounding_precision=-1)


def polygon_contains(wkt: str, x: float, y: float) -> int:
    """SQL function: 1 if (x, y) lies in the polygon's interior, else 0.

    Points on the boundary are not contained.
    """
    return 1 if loads(wkt).contains(shapely.Point(x, y)) else 0
