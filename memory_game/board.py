# memory_game/board.py
from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, TypeVar

from .errors import InsufficientSymbols, InvalidCardId, InvalidDifficulty

T = TypeVar("T")

FLOWERS = (
    "🌸", "🌺", "🌹", "🌻", "🌼", "💐", "🌷", "🌿",
    "🥀", "🪷", "🌾", "🍀", "🌱", "☘️", "🎋",
)


@dataclass(frozen=True)
class Difficulty:
    name: str
    rows: int
    cols: int
    pair_count: int


DIFFICULTIES: Dict[str, Difficulty] = {
    "easy": Difficulty("easy", rows=4, cols=4, pair_count=8),
    "medium": Difficulty("medium", rows=4, cols=5, pair_count=10),
    "hard": Difficulty("hard", rows=5, cols=6, pair_count=15),
}


@dataclass(frozen=True)
class Card:
    id: int
    symbol: str
    face_up: bool = False
    matched: bool = False


def resolve_difficulty(name: str, presets: Optional[Dict[str, Difficulty]] = None) -> Difficulty:
    presets = DIFFICULTIES if presets is None else presets
    try:
        return presets[name]
    except (KeyError, TypeError):
        raise InvalidDifficulty(f"unknown difficulty: {name!r}") from None


def shuffle(tokens: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """
    Return a uniformly random permutation of tokens (Fisher-Yates).

    The input is never mutated; rng only needs a randint(a, b) method, so a
    seeded random.Random gives reproducible decks.
    """
    rng = rng if rng is not None else random.Random()
    deck = list(tokens)
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


class Board:
    """
    Mutable Board ADT over an ordered deck of cards.

    Rep:
      - cards[i].id == i (id is the grid position)
      - each symbol appears exactly twice
      - matched => face_up
    """

    def __init__(self, difficulty: Difficulty, symbols: Sequence[str]):
        if len(symbols) != difficulty.pair_count * 2:
            raise ValueError("symbols length must equal 2 * pair_count")
        self.difficulty = difficulty
        self._cards: List[Card] = [Card(id=i, symbol=s) for i, s in enumerate(symbols)]
        self._check_rep()

    def _check_rep(self) -> None:
        counts: Dict[str, int] = {}
        for i, card in enumerate(self._cards):
            assert card.id == i
            if card.matched:
                assert card.face_up is True
            counts[card.symbol] = counts.get(card.symbol, 0) + 1
        assert all(n == 2 for n in counts.values())

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def peek(self, card_id: int) -> Card:
        self._validate_id(card_id)
        return self._cards[card_id]

    def flip_up(self, card_id: int) -> str:
        """Flip a card face-up and return its symbol."""
        card = self.peek(card_id)
        if card.matched:
            raise ValueError("cannot flip a matched card")
        if card.face_up:
            raise ValueError("already face up")
        self._cards[card_id] = replace(card, face_up=True)
        return card.symbol

    def flip_down(self, card_id: int) -> None:
        card = self.peek(card_id)
        if card.matched:
            raise ValueError("cannot flip down a matched card")
        if not card.face_up:
            return
        self._cards[card_id] = replace(card, face_up=False)

    def mark_matched(self, id1: int, id2: int) -> None:
        """Mark two face-up cards with the same symbol as permanently matched."""
        c1, c2 = self.peek(id1), self.peek(id2)
        if not c1.face_up or not c2.face_up:
            raise ValueError("both must be face up to match")
        if c1.symbol != c2.symbol:
            raise ValueError("symbols do not match")
        self._cards[id1] = replace(c1, matched=True)
        self._cards[id2] = replace(c2, matched=True)
        self._check_rep()

    def hidden(self) -> List[Card]:
        return [c for c in self._cards if not c.matched and not c.face_up]

    def matched_count(self) -> int:
        return sum(1 for c in self._cards if c.matched)

    def _validate_id(self, card_id: int) -> None:
        if isinstance(card_id, bool) or not isinstance(card_id, int):
            raise InvalidCardId(f"card id must be an integer, got {card_id!r}")
        if not 0 <= card_id < len(self._cards):
            raise InvalidCardId(f"card id {card_id} outside deck of {len(self._cards)}")


def build_deck(
    difficulty: Difficulty,
    symbols: Sequence[str] = FLOWERS,
    rng: Optional[random.Random] = None,
) -> Board:
    """Take the first pair_count symbols, duplicate them and shuffle."""
    if difficulty.pair_count > len(symbols):
        raise InsufficientSymbols(
            f"{difficulty.name} needs {difficulty.pair_count} symbols, only {len(symbols)} available"
        )
    chosen = list(symbols[: difficulty.pair_count])
    return Board(difficulty, shuffle(chosen + chosen, rng))
