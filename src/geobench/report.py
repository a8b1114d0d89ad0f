"""Formatting and export of benchmark results."""

import json
from dataclasses import asdict
from datetime import datetime
from typing import Any

from geobench.config import BenchConfig
from geobench.runner import BenchmarkRun


class Reporter:
    """Formats and prints benchmark results."""

    @staticmethod
    def summary(run: BenchmarkRun, config: BenchConfig) -> dict[str, Any]:
        """Plain-dict view of a run, suitable for JSON."""
        return {
            "timestamp": datetime.now().isoformat(),
            "database": config.database,
            "table_name": config.table_name,
            "table_engine": config.table_engine,
            "domain": asdict(config.domain),
            "worker_count": run.worker_count,
            "duration_s": run.duration,
            "elapsed_s": run.elapsed,
            "total_requests": run.total_requests,
            "total_hits": run.total_hits,
            "requests_per_sec": run.throughput,
            "workers": [asdict(r) for r in run.results],
        }

    @staticmethod
    def print_report(run: BenchmarkRun, config: BenchConfig) -> None:
        """Print formatted benchmark report."""
        print()
        print("=" * 60)
        print("Containment Benchmark Results")
        print("=" * 60)
        print(f"Database:           {config.database}")
        print(f"Table:              {config.table_name} ({config.table_engine})")
        print(f"Workers:            {run.worker_count}")
        print(f"Duration:           {run.duration:g}s")
        print(f"Elapsed:            {run.elapsed:.2f}s")
        print()

        print("--- Per Worker ---")
        print(f"{'Worker':<10} {'Requests':>12} {'Hits':>12} {'Hits/Req':>10}")
        print("-" * 48)
        for result in run.results:
            ratio = result.hits / result.requests if result.requests else 0
            print(f"{result.worker_id:<10} {result.requests:>12,} {result.hits:>12,} {ratio:>10.2f}")
        print("-" * 48)
        print(f"{'TOTAL':<10} {run.total_requests:>12,} {run.total_hits:>12,}")
        print()

        print("--- Throughput ---")
        print(f"Total requests:     {run.throughput:.1f}/s")
        print("=" * 60)

    @staticmethod
    def write_json(run: BenchmarkRun, config: BenchConfig, path: str) -> None:
        with open(path, "w") as f:
            json.dump(Reporter.summary(run, config), f, indent=2)
