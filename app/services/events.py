# app/services/events.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[dict], None]


class DraftEvents:
    """
    In-process change notifications, keyed by league.
    Events only say *what* changed ({"league_id", "kind"}); listeners re-fetch state.
    Delivery order across concurrent writers is not guaranteed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, league_id: str, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(league_id, []).append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                subs = self._listeners.get(league_id, [])
                if listener in subs:
                    subs.remove(listener)
                if not subs:
                    self._listeners.pop(league_id, None)

        return _unsubscribe

    def publish(self, league_id: str, kind: str) -> None:
        event = {"league_id": league_id, "kind": kind}
        with self._lock:
            subs = list(self._listeners.get(league_id, []))
        for listener in subs:
            try:
                listener(event)
            except Exception:
                # a dead listener must not fail the commit that triggered it
                logger.warning("draft event listener failed league=%s kind=%s", league_id, kind, exc_info=True)

    def listener_count(self, league_id: str) -> int:
        with self._lock:
            return len(self._listeners.get(league_id, []))


events = DraftEvents()
