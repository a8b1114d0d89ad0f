"""
Spatial containment benchmark for SQLite polygon tables.

Usage:
    # Create the table and fill it with 100k random polygons
    uv run python -m geobench.cli prepare \
        --database data/geotest.db \
        --table-size 100000

    # Query it from 8 threads for two minutes
    uv run python -m geobench.cli run \
        --database data/geotest.db \
        --num-threads 8 \
        --max-time 2m

    # Drop the table
    uv run python -m geobench.cli cleanup --database data/geotest.db
"""

import argparse
import random
import sys

from geobench.config import (
    DEFAULT_CACHE_MB,
    DEFAULT_DATABASE,
    DEFAULT_MAX_POINTS,
    DEFAULT_MIN_POINTS,
    DEFAULT_NUM_THREADS,
    DEFAULT_RADIUS,
    DEFAULT_TABLE_ENGINE,
    DEFAULT_TABLE_NAME,
    DEFAULT_TABLE_SIZE,
    DEFAULT_X_MAX,
    DEFAULT_X_MIN,
    DEFAULT_Y_MAX,
    DEFAULT_Y_MIN,
    TABLE_ENGINES,
    BenchConfig,
    ConfigError,
    Domain,
    parse_duration,
)
from geobench.populate import populate
from geobench.report import Reporter
from geobench.runner import run_benchmark
from geobench.store import SpatialStore, StoreError

MODES = ("prepare", "run", "cleanup")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Spatial containment benchmark for SQLite polygon tables"
    )
    parser.add_argument(
        "mode",
        choices=MODES,
        help="prepare: fill the table, run: query it, cleanup: drop it"
    )
    parser.add_argument(
        "--database", "-d",
        type=str,
        default=DEFAULT_DATABASE,
        help=f"Path to database file (default: {DEFAULT_DATABASE})"
    )
    parser.add_argument(
        "--table-name",
        type=str,
        default=DEFAULT_TABLE_NAME,
        help=f"Name of test table (default: {DEFAULT_TABLE_NAME})"
    )
    parser.add_argument(
        "--table-engine",
        choices=TABLE_ENGINES,
        default=DEFAULT_TABLE_ENGINE,
        help=f"Spatial index: rtree or scan (default: {DEFAULT_TABLE_ENGINE})"
    )
    parser.add_argument(
        "--table-size",
        type=int,
        default=DEFAULT_TABLE_SIZE,
        help=f"Number of records in test table (default: {DEFAULT_TABLE_SIZE})"
    )
    parser.add_argument("--x-min", type=float, default=DEFAULT_X_MIN, help=f"Min x (default: {DEFAULT_X_MIN:g})")
    parser.add_argument("--x-max", type=float, default=DEFAULT_X_MAX, help=f"Max x (default: {DEFAULT_X_MAX:g})")
    parser.add_argument("--y-min", type=float, default=DEFAULT_Y_MIN, help=f"Min y (default: {DEFAULT_Y_MIN:g})")
    parser.add_argument("--y-max", type=float, default=DEFAULT_Y_MAX, help=f"Max y (default: {DEFAULT_Y_MAX:g})")
    parser.add_argument(
        "--radius",
        type=float,
        default=DEFAULT_RADIUS,
        help=f"Max polygon radius (default: {DEFAULT_RADIUS:g})"
    )
    parser.add_argument(
        "--min-points",
        type=int,
        default=DEFAULT_MIN_POINTS,
        help=f"Min number of points in a polygon (default: {DEFAULT_MIN_POINTS})"
    )
    parser.add_argument(
        "--max-points",
        type=int,
        default=DEFAULT_MAX_POINTS,
        help=f"Max number of points in a polygon, exclusive (default: {DEFAULT_MAX_POINTS})"
    )
    parser.add_argument(
        "--max-time", "-t",
        type=str,
        default="1m",
        help="How long to run the test, e.g. 30s, 2m, 1h (default: 1m)"
    )
    parser.add_argument(
        "--num-threads", "-n",
        type=int,
        default=DEFAULT_NUM_THREADS,
        help=f"How many query threads to use (default: {DEFAULT_NUM_THREADS})"
    )
    parser.add_argument(
        "--print-segments",
        action="store_true",
        help="Print the segments of generated polygons"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "--cache-mb",
        type=int,
        default=DEFAULT_CACHE_MB,
        help=f"SQLite page cache per connection in MB (default: {DEFAULT_CACHE_MB})"
    )
    parser.add_argument(
        "--results", "-o",
        type=str,
        default=None,
        help="Path to JSON file for run results"
    )
    return parser


def build_config(args: argparse.Namespace) -> BenchConfig:
    """Turn parsed arguments into a validated BenchConfig."""
    config = BenchConfig(
        database=args.database,
        table_name=args.table_name,
        table_engine=args.table_engine,
        table_size=args.table_size,
        domain=Domain(
            x_min=args.x_min,
            x_max=args.x_max,
            y_min=args.y_min,
            y_max=args.y_max,
        ),
        radius=args.radius,
        min_points=args.min_points,
        max_points=args.max_points,
        max_time=parse_duration(args.max_time),
        num_threads=args.num_threads,
        print_segments=args.print_segments,
        seed=args.seed,
        cache_mb=args.cache_mb,
    )
    config.validate()
    return config


# =============================================================================
# Run Modes
# =============================================================================

def prepare(store: SpatialStore, config: BenchConfig) -> None:
    store.create_if_missing()
    rng = random.Random(config.seed) if config.seed is not None else random.Random()
    populate(
        store,
        config.table_size,
        config.domain,
        config.radius,
        config.min_points,
        config.max_points,
        rng=rng,
        segment_out=sys.stdout if config.print_segments else None,
    )


def run(store: SpatialStore, config: BenchConfig, results_path: str | None = None) -> None:
    print(f"Rows in table:      {store.count_rows():,}")
    bench = run_benchmark(
        store,
        config.num_threads,
        config.max_time,
        config.domain,
        seed=config.seed,
    )
    Reporter.print_report(bench, config)
    if results_path:
        Reporter.write_json(bench, config, results_path)
        print(f"Results written to: {results_path}")


def cleanup(store: SpatialStore, config: BenchConfig) -> None:
    store.drop()
    print(f"Dropped table {config.table_name}")


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    print(f"Containment Benchmark: {args.mode}")
    print("=" * 60)
    print(f"Database:           {config.database}")
    print(f"Table:              {config.table_name} ({config.table_engine})")
    print(f"Seed:               {config.seed if config.seed is not None else 'random'}")
    if args.mode == "prepare":
        print(f"Table size:         {config.table_size:,}")
        print(f"Radius:             {config.radius:g}")
        print(f"Points:             {config.min_points}..{config.max_points - 1}")
    elif args.mode == "run":
        print(f"Threads:            {config.num_threads}")
        print(f"Max time:           {config.max_time:g}s")
    print()

    try:
        with SpatialStore.from_config(config) as store:
            if args.mode == "prepare":
                prepare(store, config)
            elif args.mode == "run":
                run(store, config, args.results)
            else:
                cleanup(store, config)
    except StoreError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
