"""
SQLite-backed polygon store.

Rows hold the polygon as WKT text. With the 'rtree' engine a companion R*Tree
virtual table holds each polygon's bounding box, and containment queries use it
as a prefilter before the exact point-in-polygon test. The 'scan' engine tests
every row.
"""

import sqlite3
import threading
from typing import Sequence

from geobench.config import (
    DEFAULT_CACHE_MB,
    DEFAULT_TABLE_ENGINE,
    TABLE_ENGINES,
    BenchConfig,
    ConfigError,
    validate_table_name,
)
from geobench.geometry import Point, polygon_contains, ring_to_wkt


class StoreError(RuntimeError):
    """Raised when the backing database fails."""


# =============================================================================
# Database Configuration
# =============================================================================

def configure_connection(conn: sqlite3.Connection, cache_mb: int) -> None:
    """Configure a SQLite connection for concurrent readers."""
    cache_kb = cache_mb * 1024
    conn.execute(f"PRAGMA cache_size = -{cache_kb}")
    conn.execute("PRAGMA temp_store = MEMORY")
    # WAL lets query threads read while another connection writes
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.create_function("polygon_contains", 3, polygon_contains, deterministic=True)


# =============================================================================
# Store
# =============================================================================

class SpatialStore:
    """Polygon table with insert, count and containment-count operations.

    Every thread gets its own connection, so count_containing can be called
    from any number of worker threads at once.
    """

    def __init__(
        self,
        database: str,
        table_name: str,
        table_engine: str = DEFAULT_TABLE_ENGINE,
        cache_mb: int = DEFAULT_CACHE_MB,
    ):
        validate_table_name(table_name)
        if table_engine not in TABLE_ENGINES:
            raise ConfigError(f"unknown table engine: {table_engine!r}")

        self.database = database
        self.table_name = table_name
        self.table_engine = table_engine
        self.cache_mb = cache_mb
        self.index_name = f"{table_name}_rtree"

        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._lock = threading.Lock()

        if table_engine == "rtree":
            self._containing_sql = f"""
                SELECT COUNT(*) FROM {self.index_name} r
                JOIN {table_name} p ON p.id = r.id
                WHERE r.min_x <= :x AND r.max_x >= :x
                  AND r.min_y <= :y AND r.max_y >= :y
                  AND polygon_contains(p.poly, :x, :y)
            """
        else:
            self._containing_sql = f"""
                SELECT COUNT(*) FROM {table_name}
                WHERE polygon_contains(poly, :x, :y)
            """

    @classmethod
    def from_config(cls, config: BenchConfig) -> "SpatialStore":
        return cls(
            config.database,
            config.table_name,
            table_engine=config.table_engine,
            cache_mb=config.cache_mb,
        )

    def __enter__(self) -> "SpatialStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connection(self) -> sqlite3.Connection:
        """Return the calling thread's connection, opening it on first use."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            try:
                # Each connection stays on its thread; close() runs elsewhere
                conn = sqlite3.connect(self.database, check_same_thread=False)
            except sqlite3.Error as e:
                raise StoreError(f"cannot open database {self.database}: {e}") from e
            try:
                configure_connection(conn, self.cache_mb)
            except sqlite3.Error as e:
                conn.close()
                raise StoreError(f"cannot configure database {self.database}: {e}") from e
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return conn

    def close(self) -> None:
        """Close every connection handed out by this store."""
        with self._lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_if_missing(self) -> None:
        """Create the polygon table (and its R*Tree index) if needed."""
        conn = self.connection()
        try:
            with conn:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {self.table_name} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        poly TEXT NOT NULL,
                        c TEXT DEFAULT '' NOT NULL,
                        pad TEXT DEFAULT '' NOT NULL
                    )
                """)
                if self.table_engine == "rtree":
                    conn.execute(f"""
                        CREATE VIRTUAL TABLE IF NOT EXISTS {self.index_name}
                        USING rtree(id, min_x, max_x, min_y, max_y)
                    """)
        except sqlite3.Error as e:
            raise StoreError(f"cannot create table {self.table_name}: {e}") from e

    def drop(self) -> None:
        """Drop the polygon table and its index."""
        conn = self.connection()
        try:
            with conn:
                conn.execute(f"DROP TABLE IF EXISTS {self.index_name}")
                conn.execute(f"DROP TABLE IF EXISTS {self.table_name}")
        except sqlite3.Error as e:
            raise StoreError(f"cannot drop table {self.table_name}: {e}") from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def insert(self, ring: Sequence[Point]) -> int:
        """Insert one closed ring and return its row id."""
        xs = [x for x, _ in ring]
        ys = [y for _, y in ring]
        conn = self.connection()
        try:
            with conn:
                cursor = conn.execute(
                    f"INSERT INTO {self.table_name} (poly) VALUES (?)",
                    (ring_to_wkt(ring),)
                )
                row_id = cursor.lastrowid
                if self.table_engine == "rtree":
                    conn.execute(
                        f"INSERT INTO {self.index_name} (id, min_x, max_x, min_y, max_y) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (row_id, min(xs), max(xs), min(ys), max(ys))
                    )
        except sqlite3.Error as e:
            raise StoreError(f"insert into {self.table_name} failed: {e}") from e
        return row_id

    def count_rows(self) -> int:
        try:
            row = self.connection().execute(
                f"SELECT COUNT(*) FROM {self.table_name}"
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"cannot count rows in {self.table_name}: {e}") from e
        return row[0]

    def count_containing(self, point: Point) -> int:
        """Number of stored polygons whose interior contains the point."""
        x, y = point
        try:
            row = self.connection().execute(
                self._containing_sql, {"x": x, "y": y}
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"containment query on {self.table_name} failed: {e}") from e
        return row[0]
