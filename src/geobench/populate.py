"""Fill the polygon table up to a target row count."""

import random
import time
from typing import TextIO

from geobench.config import Domain, validate_point_range
from geobench.geometry import generate_polygon, write_segments
from geobench.store import SpatialStore

PROGRESS_EVERY = 10000


def populate(
    store: SpatialStore,
    target_count: int,
    domain: Domain,
    radius: float,
    min_points: int,
    max_points: int,
    rng: random.Random | None = None,
    segment_out: TextIO | None = None,
) -> int:
    """Insert random polygons until the table holds target_count rows.

    Rows already present count towards the target; existing rows are never
    removed, even when there are more than target_count.

    Args:
        store: Store to insert into (table must exist)
        target_count: Desired number of rows
        domain: Rectangle polygon centers are drawn from
        radius: Maximum polygon radius
        min_points: Smallest vertex count (inclusive)
        max_points: Largest vertex count (exclusive)
        rng: Random source
        segment_out: If set, every polygon's edges are written here first

    Returns:
        Number of rows inserted by this call
    """
    validate_point_range(min_points, max_points)
    rng = rng or random.Random()

    start = store.count_rows()
    print(f"Start number of rows: {start:,}")
    if start >= target_count:
        print(f"Table already holds {start:,} rows (target {target_count:,}), nothing to do")
        return 0

    to_insert = target_count - start
    start_time = time.time()
    for i in range(to_insert):
        polygon = generate_polygon(domain, radius, min_points, max_points, rng)
        if segment_out is not None:
            write_segments(polygon, segment_out)
        store.insert(polygon.ring)

        if (i + 1) % PROGRESS_EVERY == 0:
            elapsed = time.time() - start_time
            rate = (i + 1) / elapsed if elapsed > 0 else 0
            print(f"  Progress: {i + 1:,}/{to_insert:,} ({rate:.0f} rows/sec)")

    print(f"End number of rows: {store.count_rows():,}")
    return to_insert
