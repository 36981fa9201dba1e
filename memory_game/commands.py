# memory_game/commands.py
from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .board import Board, Card, Difficulty, build_deck, resolve_difficulty
from .config import GameConfig
from .scheduler import Handle, ManualScheduler, Scheduler

logger = logging.getLogger(__name__)

EVENTS = ("state_changed", "tick", "hint", "won")

Listener = Callable[..., None]


@dataclass
class GameSession:
    board: Board
    generation: int
    hints_remaining: int
    revealed_unmatched_ids: List[int] = field(default_factory=list)
    matched_pair_count: int = 0
    move_count: int = 0
    elapsed_seconds: int = 0
    active: bool = True
    score: Optional[int] = None

    @property
    def difficulty(self) -> Difficulty:
        return self.board.difficulty

    @property
    def cards(self) -> List[Card]:
        return self.board.cards


@dataclass(frozen=True)
class CardView:
    id: int
    symbol: Optional[str]  # None while face-down
    face_up: bool
    matched: bool


@dataclass(frozen=True)
class Snapshot:
    difficulty: str
    rows: int
    cols: int
    cards: Tuple[CardView, ...]
    matched_pair_count: int
    pair_count: int
    move_count: int
    elapsed_seconds: int
    hints_remaining: int
    active: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WinResult:
    elapsed_seconds: int
    move_count: int
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_score(
    difficulty: Difficulty, elapsed_seconds: int, move_count: int, config: Optional[GameConfig] = None
) -> int:
    config = config or GameConfig()
    time_bonus = max(0, config.time_bonus_ceiling - elapsed_seconds)
    move_bonus = max(0, difficulty.pair_count * config.move_bonus_per_pair - move_count)
    return time_bonus + move_bonus + config.difficulty_bonus.get(difficulty.name, 0)


def snapshot_of(session: GameSession) -> Snapshot:
    d = session.difficulty
    cards = tuple(
        CardView(
            id=c.id,
            symbol=c.symbol if (c.face_up or c.matched) else None,
            face_up=c.face_up,
            matched=c.matched,
        )
        for c in session.cards
    )
    return Snapshot(
        difficulty=d.name,
        rows=d.rows,
        cols=d.cols,
        cards=cards,
        matched_pair_count=session.matched_pair_count,
        pair_count=d.pair_count,
        move_count=session.move_count,
        elapsed_seconds=session.elapsed_seconds,
        hints_remaining=session.hints_remaining,
        active=session.active,
    )


class GameEngine:
    """
    Owns the single live GameSession and every rule that mutates it.

    The engine never blocks: the one-second timer and the mismatch flip-back
    are callbacks on the injected scheduler. Each callback captures the
    session generation it was scheduled for and does nothing once a newer
    session has replaced it.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        config: Optional[GameConfig] = None,
    ):
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.rng = rng if rng is not None else random.Random()
        self.config = config or GameConfig()
        self.session: Optional[GameSession] = None
        self._generation = 0
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in EVENTS}
        self._timer: Optional[Handle] = None
        self._flip_back: Optional[Handle] = None

    # ----- events -----

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        if event not in self._listeners:
            raise ValueError(f"unknown event: {event!r}")
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception:
                logger.exception("listener for %s failed", event)

    def _emit_state(self) -> None:
        self._emit("state_changed", snapshot_of(self.session))

    def snapshot(self) -> Optional[Snapshot]:
        return snapshot_of(self.session) if self.session is not None else None

    # ----- commands -----

    def start(self, difficulty: str) -> None:
        preset = resolve_difficulty(difficulty, self.config.difficulties)
        board = build_deck(preset, self.config.symbols, self.rng)

        self._cancel_pending()
        self._generation += 1
        self.session = GameSession(
            board=board,
            generation=self._generation,
            hints_remaining=self.config.hints_per_game,
        )
        logger.info("started %s game (generation %d)", preset.name, self._generation)
        self._schedule_tick(self._generation)
        self._emit_state()

    def restart(self) -> None:
        if self.session is None:
            logger.debug("restart ignored: no game to restart")
            return
        self.start(self.session.difficulty.name)

    def quit(self) -> None:
        s = self.session
        if s is None or not s.active:
            return
        s.active = False
        self._stop_timer()
        logger.info("game quit after %d moves", s.move_count)
        self._emit_state()

    def select_card(self, card_id: int) -> None:
        s = self.session
        if s is None or not s.active:
            return
        card = s.board.peek(card_id)  # raises InvalidCardId
        if len(s.revealed_unmatched_ids) >= 2 or card.face_up or card.matched:
            return

        s.board.flip_up(card_id)
        s.revealed_unmatched_ids.append(card_id)
        if len(s.revealed_unmatched_ids) < 2:
            self._emit_state()
            return

        s.move_count += 1
        first, second = s.revealed_unmatched_ids
        if s.board.peek(first).symbol == s.board.peek(second).symbol:
            s.board.mark_matched(first, second)
            s.revealed_unmatched_ids = []
            s.matched_pair_count += 1
            logger.debug("matched cards %d and %d", first, second)
            if s.matched_pair_count == s.difficulty.pair_count:
                self._win()
            else:
                self._emit_state()
            return

        logger.debug("mismatch on cards %d and %d", first, second)
        self._emit_state()
        generation = s.generation
        self._flip_back = self.scheduler.call_later(
            self.config.mismatch_delay, lambda: self._resolve_mismatch(generation, first, second)
        )

    def request_hint(self) -> Optional[Tuple[int, int]]:
        s = self.session
        if s is None or not s.active or s.hints_remaining <= 0:
            return None
        hidden = s.board.hidden()
        if len(hidden) < 2:
            return None

        # dicts keep insertion order, and hidden is sorted by id, so the first
        # group to fill up is the one with the lowest first-occurrence id
        groups: Dict[str, List[int]] = {}
        for card in hidden:
            groups.setdefault(card.symbol, []).append(card.id)
        pair = next((ids[:2] for ids in groups.values() if len(ids) >= 2), None)
        if pair is None:
            return None

        s.hints_remaining -= 1
        a, b = pair
        self._emit("hint", a, b)
        return a, b

    # ----- internals -----

    def _win(self) -> None:
        s = self.session
        s.active = False
        self._stop_timer()
        s.score = compute_score(s.difficulty, s.elapsed_seconds, s.move_count, self.config)
        logger.info(
            "game won in %ds with %d moves, score %d", s.elapsed_seconds, s.move_count, s.score
        )
        self._emit_state()
        self._emit("won", WinResult(s.elapsed_seconds, s.move_count, s.score))

    def _resolve_mismatch(self, generation: int, first: int, second: int) -> None:
        s = self.session
        if s is None or s.generation != generation:
            return
        self._flip_back = None
        s.board.flip_down(first)
        s.board.flip_down(second)
        s.revealed_unmatched_ids = []
        self._emit_state()

    def _schedule_tick(self, generation: int) -> None:
        self._timer = self.scheduler.call_later(
            self.config.tick_interval, lambda: self._tick(generation)
        )

    def _tick(self, generation: int) -> None:
        s = self.session
        if s is None or s.generation != generation or not s.active:
            return
        s.elapsed_seconds += 1
        self._emit("tick", s.elapsed_seconds)
        self._schedule_tick(generation)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_pending(self) -> None:
        self._stop_timer()
        if self._flip_back is not None:
            self._flip_back.cancel()
            self._flip_back = None
