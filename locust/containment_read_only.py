"""
Locust driver for the SQLite containment benchmark.

Issues the same point-in-polygon count queries as `geobench.cli run`, but
under locust's user ramp-up and reporting. The table must already be filled
with `geobench.cli prepare`. Queries block the gevent loop, so all users share
one core; start several locust workers to use more.

Usage:
    GEOBENCH_DATABASE=data/geotest.db \
        locust -f locust/containment_read_only.py --headless -u 8 -r 8 -t 2m
"""

import os
import random
import time

from locust import User, constant, events, task
from locust.exception import StopUser

from geobench.config import DEFAULT_DATABASE, DEFAULT_TABLE_ENGINE, DEFAULT_TABLE_NAME, Domain
from geobench.geometry import random_point
from geobench.store import SpatialStore, StoreError


# =============================================================================
# Configuration
# =============================================================================

DB_PATH = os.getenv("GEOBENCH_DATABASE", DEFAULT_DATABASE)
TABLE_NAME = os.getenv("GEOBENCH_TABLE", DEFAULT_TABLE_NAME)
TABLE_ENGINE = os.getenv("GEOBENCH_TABLE_ENGINE", DEFAULT_TABLE_ENGINE)

DOMAIN = Domain(
    x_min=float(os.getenv("GEOBENCH_X_MIN", "-10000")),
    x_max=float(os.getenv("GEOBENCH_X_MAX", "10000")),
    y_min=float(os.getenv("GEOBENCH_Y_MIN", "-10000")),
    y_max=float(os.getenv("GEOBENCH_Y_MAX", "10000")),
)


# =============================================================================
# Locust User Class
# =============================================================================

class ContainmentQueryUser(User):
    """Locust user that counts polygons containing random points."""
    wait_time = constant(0)  # As fast as the store answers

    store: SpatialStore | None = None
    rng: random.Random

    def on_start(self):
        """Open a private store connection for this user."""
        self.store = SpatialStore(DB_PATH, TABLE_NAME, table_engine=TABLE_ENGINE)
        self.rng = random.Random()

    def on_stop(self):
        if self.store is not None:
            self.store.close()
            self.store = None

    @task
    def count_containing(self):
        """One containment query, reported as a locust request."""
        point = random_point(DOMAIN, self.rng)
        start = time.perf_counter()
        try:
            hits = self.store.count_containing(point)
        except StoreError as e:
            self.environment.events.request.fire(
                request_type="sqlite",
                name="count_containing",
                response_time=(time.perf_counter() - start) * 1000,
                response_length=0,
                exception=e,
            )
            # A failing store invalidates the run
            raise StopUser()

        self.environment.events.request.fire(
            request_type="sqlite",
            name="count_containing",
            response_time=(time.perf_counter() - start) * 1000,
            response_length=hits,
            exception=None,
        )


# =============================================================================
# Test Initialization Hook
# =============================================================================

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Check the table is there before users start querying it."""
    print("=" * 60)
    print("Initializing containment read-only stress test")
    print("=" * 60)
    print(f"Database path: {DB_PATH}")
    print(f"Table:         {TABLE_NAME} ({TABLE_ENGINE})")
    print(f"Domain:        x {DOMAIN.x_min:g}..{DOMAIN.x_max:g}, y {DOMAIN.y_min:g}..{DOMAIN.y_max:g}")

    with SpatialStore(DB_PATH, TABLE_NAME, table_engine=TABLE_ENGINE) as store:
        rows = store.count_rows()
    print(f"Rows in table: {rows:,}")
    print()
