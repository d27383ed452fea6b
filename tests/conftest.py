import random

import pytest

from winterolympics.controllers.tournament import Tournament
from winterolympics.storage.store import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def tournament(store):
    return Tournament(store=store)


@pytest.fixture
def five_teams(tournament):
    for name in ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]:
        tournament.add_team(name, [f"{name} one", f"{name} two"])
    return tournament


@pytest.fixture
def rng():
    return random.Random(42)
