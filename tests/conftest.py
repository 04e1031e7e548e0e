import os
import random
import tempfile

import pytest

# keep the suite away from any config.json a player has edited
os.environ.setdefault(
    "GRIDRUSH_CONFIG", os.path.join(tempfile.mkdtemp(prefix="gridrush-"), "config.json")
)

from gridrush.session import GameSession, SessionTuning  # noqa: E402
from gridrush.storage import MemoryKV, SaveStore  # noqa: E402


class ScriptedRng:
    """Stand-in for ``random`` that replays queued answers.

    Unscripted calls fall back to the lowest value, the first element or the
    leading slice so results stay predictable.
    """

    def __init__(self, ints=(), floats=(), choices=()) -> None:
        self.ints = list(ints)
        self.floats = list(floats)
        self.choices = list(choices)

    def randint(self, lo: int, hi: int) -> int:
        if self.ints:
            value = self.ints.pop(0)
            assert lo <= value <= hi, (lo, value, hi)
            return value
        return lo

    def random(self) -> float:
        return self.floats.pop(0) if self.floats else 0.0

    def choice(self, seq):
        if self.choices:
            wanted = self.choices.pop(0)
            assert wanted in seq, (wanted, seq)
            return wanted
        return seq[0]

    def sample(self, population, k: int):
        return list(population)[:k]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240517)


@pytest.fixture
def store() -> SaveStore:
    return SaveStore(MemoryKV())


@pytest.fixture
def session(store: SaveStore, rng: random.Random) -> GameSession:
    return GameSession(store, tuning=SessionTuning(), rng=rng)
