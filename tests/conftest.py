# tests/conftest.py
import random
from typing import Dict, List, Tuple

import pytest

from memory_game.commands import GameEngine
from memory_game.scheduler import ManualScheduler


class Recorder:
    """Subscribes to every engine event and keeps them in order."""

    def __init__(self, engine: GameEngine):
        self.events: List[Tuple[str, tuple]] = []
        for name in ("state_changed", "tick", "hint", "won"):
            engine.subscribe(name, self._make(name))

    def _make(self, name):
        return lambda *args: self.events.append((name, args))

    def of(self, name: str) -> List[tuple]:
        return [args for kind, args in self.events if kind == name]

    def clear(self) -> None:
        self.events.clear()


def _pairs(engine: GameEngine) -> List[List[int]]:
    groups: Dict[str, List[int]] = {}
    for card in engine.session.cards:
        groups.setdefault(card.symbol, []).append(card.id)
    return list(groups.values())


def _mismatch(engine: GameEngine) -> Tuple[int, int]:
    cards = engine.session.cards
    other = next(c.id for c in cards if c.symbol != cards[0].symbol)
    return 0, other


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(scheduler):
    return GameEngine(scheduler=scheduler, rng=random.Random(1234))


@pytest.fixture
def recorder(engine):
    return Recorder(engine)


@pytest.fixture
def make_recorder():
    return Recorder


@pytest.fixture
def pairs():
    """Ids of each pair in the live session, grouped by symbol in id order."""
    return _pairs


@pytest.fixture
def mismatch():
    """Card 0 and the first card whose symbol differs from it."""
    return _mismatch
