# memory_game/__init__.py
"""Flower Memory: a concentration card game engine."""

from .board import DIFFICULTIES, FLOWERS, Board, Card, Difficulty, build_deck, shuffle
from .commands import GameEngine, GameSession, Snapshot, WinResult, compute_score
from .config import GameConfig, ServerSettings
from .errors import GameError, InsufficientSymbols, InvalidCardId, InvalidDifficulty
from .scheduler import AsyncioScheduler, ManualScheduler

__all__ = [
    "DIFFICULTIES",
    "FLOWERS",
    "Board",
    "Card",
    "Difficulty",
    "build_deck",
    "shuffle",
    "GameEngine",
    "GameSession",
    "Snapshot",
    "WinResult",
    "compute_score",
    "GameConfig",
    "ServerSettings",
    "GameError",
    "InsufficientSymbols",
    "InvalidCardId",
    "InvalidDifficulty",
    "AsyncioScheduler",
    "ManualScheduler",
]
