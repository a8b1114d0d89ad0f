"""Run configuration for the spatial containment benchmark."""

import re
from dataclasses import dataclass, field


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_DATABASE = "geobench.db"
DEFAULT_TABLE_NAME = "geotest"
DEFAULT_TABLE_ENGINE = "rtree"
DEFAULT_TABLE_SIZE = 10000

DEFAULT_X_MIN = -10000.0
DEFAULT_X_MAX = 10000.0
DEFAULT_Y_MIN = -10000.0
DEFAULT_Y_MAX = 10000.0
DEFAULT_RADIUS = 300.0
DEFAULT_MIN_POINTS = 3
DEFAULT_MAX_POINTS = 20

DEFAULT_MAX_TIME = 60.0  # seconds
DEFAULT_NUM_THREADS = 1

# SQLite page cache per connection
DEFAULT_CACHE_MB = 64

TABLE_ENGINES = ("rtree", "scan")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")


class ConfigError(ValueError):
    """Raised when the run configuration is unusable."""


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class Domain:
    """Rectangular coordinate region polygons and query points live in."""
    x_min: float = DEFAULT_X_MIN
    x_max: float = DEFAULT_X_MAX
    y_min: float = DEFAULT_Y_MIN
    y_max: float = DEFAULT_Y_MAX


@dataclass(frozen=True)
class BenchConfig:
    """Immutable settings shared by the prepare, run and cleanup modes."""
    database: str = DEFAULT_DATABASE
    table_name: str = DEFAULT_TABLE_NAME
    table_engine: str = DEFAULT_TABLE_ENGINE
    table_size: int = DEFAULT_TABLE_SIZE
    domain: Domain = field(default_factory=Domain)
    radius: float = DEFAULT_RADIUS
    min_points: int = DEFAULT_MIN_POINTS
    max_points: int = DEFAULT_MAX_POINTS
    max_time: float = DEFAULT_MAX_TIME
    num_threads: int = DEFAULT_NUM_THREADS
    print_segments: bool = False
    seed: int | None = None
    cache_mb: int = DEFAULT_CACHE_MB

    def validate(self) -> None:
        """Raise ConfigError for settings no run mode can work with."""
        validate_table_name(self.table_name)
        if self.table_engine not in TABLE_ENGINES:
            raise ConfigError(
                f"table engine must be one of {', '.join(TABLE_ENGINES)}, got {self.table_engine!r}"
            )
        if self.domain.x_max <= self.domain.x_min:
            raise ConfigError(f"x_max ({self.domain.x_max}) must be greater than x_min ({self.domain.x_min})")
        if self.domain.y_max <= self.domain.y_min:
            raise ConfigError(f"y_max ({self.domain.y_max}) must be greater than y_min ({self.domain.y_min})")
        if self.radius < 0:
            raise ConfigError(f"radius must not be negative, got {self.radius}")
        validate_point_range(self.min_points, self.max_points)
        if self.table_size < 0:
            raise ConfigError(f"table size must not be negative, got {self.table_size}")
        if self.max_time <= 0:
            raise ConfigError(f"max time must be positive, got {self.max_time}")
        if self.num_threads < 1:
            raise ConfigError(f"num threads must be at least 1, got {self.num_threads}")
        if self.cache_mb < 0:
            raise ConfigError(f"cache size must not be negative, got {self.cache_mb}")


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_table_name(name: str) -> None:
    """Table names are interpolated into DDL, so only plain identifiers pass."""
    if not _IDENTIFIER.match(name):
        raise ConfigError(f"invalid table name: {name!r}")


def validate_point_range(min_points: int, max_points: int) -> None:
    """Vertex counts are drawn from [min_points, max_points)."""
    if min_points < 3:
        raise ConfigError(f"min_points must be at least 3, got {min_points}")
    if max_points <= min_points:
        raise ConfigError(
            f"max_points ({max_points}) must be greater than min_points ({min_points})"
        )


def parse_duration(text: str) -> float:
    """Parse '500ms', '30s', '2m', '1h' or bare seconds into seconds.

    Compound values such as '1m30s' are accepted as well.
    """
    text = text.strip()
    if not text:
        raise ConfigError("empty duration")

    total = 0.0
    for part in re.findall(r"\d+(?:\.\d+)?\s*(?:ms|s|m|h)?", text):
        match = _DURATION.match(part)
        if not match:
            raise ConfigError(f"invalid duration: {text!r}")
        value, unit = match.groups()
        total += float(value) * _DURATION_UNITS[unit or "s"]

    # Reject anything findall skipped over (e.g. '10x', '-5s')
    if re.sub(r"\d+(?:\.\d+)?\s*(?:ms|s|m|h)?", "", text).strip():
        raise ConfigError(f"invalid duration: {text!r}")
    return total
