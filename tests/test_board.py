# tests/test_board.py
import random
from collections import Counter

import pytest

from memory_game.board import (
    DIFFICULTIES, FLOWERS, Board, Difficulty, build_deck, resolve_difficulty, shuffle,
)
from memory_game.errors import InsufficientSymbols, InvalidCardId, InvalidDifficulty

TINY = Difficulty("tiny", rows=2, cols=2, pair_count=2)


def test_flip_and_match():
    b = Board(TINY, ["A", "A", "B", "B"])

    v1 = b.flip_up(0)
    v2 = b.flip_up(1)
    assert v1 == "A" and v2 == "A"

    b.mark_matched(0, 1)
    assert b.peek(0).matched is True
    assert b.peek(1).matched is True
    assert b.matched_count() == 2
    assert [c.id for c in b.hidden()] == [2, 3]


def test_cannot_flip_matched():
    b = Board(TINY, ["X", "X", "Y", "Y"])
    b.flip_up(0)
    b.flip_up(1)
    b.mark_matched(0, 1)
    with pytest.raises(ValueError):
        b.flip_up(0)
    with pytest.raises(ValueError):
        b.flip_down(0)


def test_mark_matched_requires_same_symbol():
    b = Board(TINY, ["X", "Y", "X", "Y"])
    b.flip_up(0)
    b.flip_up(1)
    with pytest.raises(ValueError):
        b.mark_matched(0, 1)


def test_invalid_card_id():
    b = Board(TINY, ["A", "A", "B", "B"])
    for bad in (-1, 4, "1", None, True):
        with pytest.raises(InvalidCardId):
            b.peek(bad)


@pytest.mark.parametrize("name", sorted(DIFFICULTIES))
def test_deck_has_each_symbol_twice(name):
    d = DIFFICULTIES[name]
    board = build_deck(d, FLOWERS, random.Random(0))
    counts = Counter(c.symbol for c in board.cards)

    assert len(board) == 2 * d.pair_count == d.rows * d.cols
    assert len(counts) == d.pair_count
    assert set(counts.values()) == {2}
    assert set(counts) == set(FLOWERS[: d.pair_count])
    assert not any(c.face_up or c.matched for c in board.cards)


def test_alphabet_covers_largest_preset():
    assert len(set(FLOWERS)) >= max(d.pair_count for d in DIFFICULTIES.values())


def test_insufficient_symbols():
    with pytest.raises(InsufficientSymbols):
        build_deck(DIFFICULTIES["hard"], FLOWERS[:10])


def test_resolve_difficulty():
    assert resolve_difficulty("medium").pair_count == 10
    with pytest.raises(InvalidDifficulty):
        resolve_difficulty("nightmare")


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    tokens = list("AABBCCDDEE")
    before = list(tokens)
    out = shuffle(tokens, random.Random(42))
    assert tokens == before
    assert sorted(out) == sorted(tokens)


def test_shuffle_is_reproducible_with_seed():
    tokens = list(range(20))
    assert shuffle(tokens, random.Random(5)) == shuffle(tokens, random.Random(5))


class ScriptedRandom:
    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.draws.pop(0)


def test_shuffle_walks_down_from_last_index():
    rng = ScriptedRandom([0, 0, 0])
    out = shuffle(["a", "b", "c", "d"], rng)
    assert rng.calls == [(0, 3), (0, 2), (0, 1)]
    # swap(3,0) -> d b c a ; swap(2,0) -> c b d a ; swap(1,0) -> b c d a
    assert out == ["b", "c", "d", "a"]


def test_shuffle_all_orderings_reachable():
    seen = {tuple(shuffle("abc", random.Random(seed))) for seed in range(200)}
    assert len(seen) == 6
