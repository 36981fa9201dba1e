# memory_game/errors.py
from __future__ import annotations


class GameError(ValueError):
    """Base class for errors the engine reports to its caller."""

    kind = "game_error"


class InvalidDifficulty(GameError):
    kind = "invalid_difficulty"


class InvalidCardId(GameError):
    kind = "invalid_card_id"


class InsufficientSymbols(GameError):
    """Configuration error: a preset asks for more pairs than there are symbols."""

    kind = "insufficient_symbols"
