import pytest

from geobench.store import SpatialStore


@pytest.fixture(params=["rtree", "scan"])
def store(request, tmp_path):
    """Empty polygon table in a temporary database, for both engines."""
    store = SpatialStore(str(tmp_path / "geotest.db"), "geotest", table_engine=request.param)
    store.create_if_missing()
    yield store
    store.close()


class ZeroStore:
    """Stand-in store whose containment queries never match."""

    def __init__(self):
        self.rows = 0

    def count_rows(self):
        return self.rows

    def insert(self, ring):
        self.rows += 1
        return self.rows

    def count_containing(self, point):
        return 0


@pytest.fixture
def zero_store():
    return ZeroStore()
