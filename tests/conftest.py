# tests/conftest.py
import random

import pytest

from brainmatch.game import MatchGame
from brainmatch.scheduler import ManualScheduler
from brainmatch.storage import MemoryStore


class NoShuffle(random.Random):
    """Leaves the deck in its given order so tile positions are known."""

    def shuffle(self, x, *args, **kwargs):
        pass


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def game(scheduler, store):
    # Board is laid out as A A B B
    return MatchGame(deck=["A", "A", "B", "B"], scheduler=scheduler, store=store, delay=1.0, rng=NoShuffle())
