# memory_game/server.py
from __future__ import annotations

import logging
import random
import time
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from flask import Flask, jsonify, request

from .commands import GameEngine, WinResult
from .config import ServerSettings
from .errors import GameError
from .scheduler import ManualScheduler

logger = logging.getLogger(__name__)


class EventQueue:
    """Collects tick/hint/won events until the next response drains them."""

    def __init__(self, engine: GameEngine):
        self._events: List[Dict[str, Any]] = []
        engine.subscribe("tick", lambda elapsed: self._push("tick", elapsed_seconds=elapsed))
        engine.subscribe("hint", lambda a, b: self._push("hint", card_ids=[a, b]))
        engine.subscribe("won", self._on_won)

    def _push(self, kind: str, **payload: Any) -> None:
        if kind == "tick":
            # only the latest elapsed time matters to a renderer
            self._events = [e for e in self._events if e["type"] != "tick"]
        self._events.append({"type": kind, **payload})

    def _on_won(self, result: WinResult) -> None:
        self._push("won", **result.to_dict())

    def drain(self) -> List[Dict[str, Any]]:
        events, self._events = self._events, []
        return events


def create_app(
    engine: Optional[GameEngine] = None,
    scheduler: Optional[ManualScheduler] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Flask:
    """
    Build a Flask app serving one GameEngine.

    Scheduled engine callbacks only run when a request comes in: the wall
    clock advances the ManualScheduler before each command, so timer ticks
    and flip-backs fire in order, one at a time.
    """
    if engine is None:
        scheduler = scheduler or ManualScheduler(start=clock())
        engine = GameEngine(scheduler=scheduler)
    elif scheduler is None:
        scheduler = engine.scheduler
    if not isinstance(scheduler, ManualScheduler):
        raise TypeError(
            f"create_app needs a ManualScheduler driven by the request clock, got {type(scheduler).__name__}"
        )

    app = Flask(__name__)
    lock = RLock()
    events = EventQueue(engine)

    def respond(status: int = 200):
        snap = engine.snapshot()
        body = {
            "status": "ok",
            "state": snap.to_dict() if snap is not None else None,
            "events": events.drain(),
        }
        return jsonify(body), status

    def error(kind: str, message: str, status: int = 400):
        logger.warning("rejected request %s: %s", request.path, message)
        return jsonify({"status": "error", "error": kind, "message": message}), status

    def json_body() -> Dict[str, Any]:
        data = request.get_json(force=True, silent=True)
        return data if isinstance(data, dict) else {}

    @app.before_request
    def catch_up():
        with lock:
            scheduler.advance_to(clock())

    @app.errorhandler(GameError)
    def game_error(e: GameError):
        return error(e.kind, str(e))

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/difficulties")
    def difficulties():
        presets = [
            {"name": d.name, "rows": d.rows, "cols": d.cols, "pair_count": d.pair_count}
            for d in engine.config.difficulties.values()
        ]
        return jsonify({"status": "ok", "difficulties": presets})

    @app.get("/state")
    def state():
        with lock:
            return respond()

    @app.post("/start")
    def api_start():
        data = json_body()
        if "difficulty" not in data:
            return error("bad_request", "missing field: difficulty")
        with lock:
            engine.start(data["difficulty"])
            return respond()

    @app.post("/select")
    def api_select():
        data = json_body()
        card_id = data.get("card_id")
        if isinstance(card_id, bool) or not isinstance(card_id, int):
            return error("bad_request", "card_id must be an integer")
        with lock:
            engine.select_card(card_id)
            return respond()

    @app.post("/hint")
    def api_hint():
        with lock:
            engine.request_hint()
            return respond()

    @app.post("/restart")
    def api_restart():
        with lock:
            engine.restart()
            return respond()

    @app.post("/quit")
    def api_quit():
        with lock:
            engine.quit()
            return respond()

    return app


def main() -> None:
    settings = ServerSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    scheduler = ManualScheduler(start=time.monotonic())
    engine = GameEngine(scheduler=scheduler, rng=random.Random(settings.seed))
    app = create_app(engine, scheduler)
    app.run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
