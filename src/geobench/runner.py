"""
Fixed-duration containment query benchmark.

Each worker runs in its own thread with a private stop event and private
counters. The coordinator waits out the run duration, sets every stop event
once, then joins all workers and sums their request counts.
"""

import random
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from threading import Event

from geobench.config import Domain
from geobench.geometry import random_point
from geobench.store import SpatialStore


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class WorkerResult:
    """Counters owned by one worker until it returns."""
    worker_id: int
    requests: int = 0
    hits: int = 0


@dataclass
class BenchmarkRun:
    """Settings and collected results of one benchmark run."""
    worker_count: int
    duration: float
    results: list[WorkerResult] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def total_requests(self) -> int:
        return sum(r.requests for r in self.results)

    @property
    def total_hits(self) -> int:
        return sum(r.hits for r in self.results)

    @property
    def throughput(self) -> float:
        """Requests per second over the configured duration."""
        return self.total_requests / self.duration


# =============================================================================
# Worker
# =============================================================================

def run_worker(
    store: SpatialStore,
    domain: Domain,
    stop: Event,
    rng: random.Random,
    worker_id: int = 0,
) -> WorkerResult:
    """Issue containment queries at random points until stop is set.

    Query errors are not caught: they end the worker and, through the
    coordinator, the whole run.
    """
    print(f"Start worker {worker_id}")
    result = WorkerResult(worker_id=worker_id)
    while not stop.is_set():
        point = random_point(domain, rng)
        result.hits += store.count_containing(point)
        result.requests += 1
    print(f"Done {result.requests} requests, {result.hits} hits")
    return result


# =============================================================================
# Coordinator
# =============================================================================

def run_benchmark(
    store: SpatialStore,
    worker_count: int,
    duration: float,
    domain: Domain,
    seed: int | None = None,
) -> BenchmarkRun:
    """Run worker_count workers for duration seconds.

    Args:
        store: Store the workers query
        worker_count: Number of concurrent workers
        duration: Run length in seconds
        domain: Rectangle query points are drawn from
        seed: Base seed; worker i uses seed + i

    Returns:
        BenchmarkRun with exactly worker_count results

    Raises:
        The first error raised by any worker, after all workers have stopped.
    """
    run = BenchmarkRun(worker_count=worker_count, duration=duration)
    stops = [Event() for _ in range(worker_count)]
    rngs = [
        random.Random(seed + i) if seed is not None else random.Random()
        for i in range(worker_count)
    ]

    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="geobench-worker") as executor:
        futures = [
            executor.submit(run_worker, store, domain, stops[i], rngs[i], i)
            for i in range(worker_count)
        ]

        print(f"Sleep {duration:g}s")
        start_time = time.perf_counter()
        # Returns early only if a worker fails
        wait(futures, timeout=duration, return_when=FIRST_EXCEPTION)

        for stop in stops:
            stop.set()

        # result() re-raises a worker's exception
        run.results = [future.result() for future in futures]
        run.elapsed = time.perf_counter() - start_time

    return run
