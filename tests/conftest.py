import pytest
from src.signals.domain.entities import Durations, IntersectionRecord
from src.signals.infrastructure.persistence import InMemoryIntersectionStore

class FakeClock:
    """Monotonic clock the test moves by hand."""
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

class CountingIds:
    def __init__(self, start: int = 1):
        self.next_id = start

    def __call__(self) -> int:
        value = self.next_id
        self.next_id += 1
        return value

@pytest.fixture
def fake_clock():
    return FakeClock()

@pytest.fixture
def memory_store():
    return InMemoryIntersectionStore()

@pytest.fixture
def counting_ids():
    return CountingIds()

@pytest.fixture
def sample_record():
    return IntersectionRecord(
        id=1,
        name="Main St & 1st Ave",
        schedule_time="08:00:00",
        durations=Durations(green=2, yellow=1, red=2),
    )
