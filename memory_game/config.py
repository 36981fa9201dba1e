# memory_game/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .board import DIFFICULTIES, FLOWERS, Difficulty


@dataclass(frozen=True)
class GameConfig:
    difficulties: Dict[str, Difficulty] = field(default_factory=lambda: dict(DIFFICULTIES))
    symbols: Tuple[str, ...] = FLOWERS
    hints_per_game: int = 3
    mismatch_delay: float = 1.0  # seconds
    tick_interval: float = 1.0  # seconds
    time_bonus_ceiling: int = 300
    move_bonus_per_pair: int = 10
    difficulty_bonus: Dict[str, int] = field(
        default_factory=lambda: {"easy": 100, "medium": 200, "hard": 300}
    )


@dataclass(frozen=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ=None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        seed = env.get("MEMORY_GAME_SEED")
        return cls(
            host=env.get("MEMORY_GAME_HOST", cls.host),
            port=int(env.get("MEMORY_GAME_PORT", cls.port)),
            log_level=env.get("MEMORY_GAME_LOG_LEVEL", cls.log_level).upper(),
            seed=int(seed) if seed else None,
        )
