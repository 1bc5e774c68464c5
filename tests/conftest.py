"""Shared fixtures: deterministic clocks, rng and stores."""
import random
from datetime import datetime

import pytest

from data.kv_store import MemoryKeyValueStore
from game.runtime.clock import ManualClock
from game.runtime.progress_store import ProgressStore


class PinnedRandom(random.Random):
    """random() always returns the same value, so uniform(a, b) is fixed."""

    def __init__(self, value: float = 0.5) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeToday:
    def __init__(self, value: datetime) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def pinned_rng():
    # uniform(-d, d) == 0.0 exactly: no drift
    return PinnedRandom(0.5)


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def today():
    return FakeToday(datetime(2024, 3, 10, 12, 0, 0))


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv, today):
    return ProgressStore(kv, today=today)


@pytest.fixture
def make_pinned():
    return PinnedRandom
