import pytest

from studysphere.store import PersistentStore
from studysphere.timer import IntervalScheduler


class FakeClock:
    """Wall clock in epoch milliseconds that only moves when told to."""

    def __init__(self, ms: int = 1_700_000_000_000):
        self.ms = ms

    def __call__(self) -> int:
        return self.ms

    def advance(self, ms: int) -> None:
        self.ms += ms

    def seconds(self) -> float:
        return self.ms / 1000


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_studysphere.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    return PersistentStore(tmp_db)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return IntervalScheduler(clock=clock.seconds)
