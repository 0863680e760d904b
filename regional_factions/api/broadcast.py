"""
Broadcast adapter: propagates committed ledger changes to other observers.
Listeners are plain callables; the WebSocket endpoint registers one that hands messages to its event loop.
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]

REGIONAL_UPDATE = "regionalUpdate"
EVENT_LOG_CLEARED = "eventLogCleared"


class Broadcaster:
    """In-process pub/sub keyed by campaign id."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._guard = threading.Lock()

    def subscribe(self, campaign_id: str, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a callable that unsubscribes it."""
        with self._guard:
            self._listeners[campaign_id].append(listener)

        def unsubscribe() -> None:
            with self._guard:
                listeners = self._listeners.get(campaign_id, [])
                if listener in listeners:
                    listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(campaign_id, None)

        return unsubscribe

    def subscriber_count(self, campaign_id: str) -> int:
        with self._guard:
            return len(self._listeners.get(campaign_id, []))

    def publish(self, campaign_id: str, message: dict[str, Any]) -> int:
        """Deliver message to every listener of the campaign. Returns how many were reached."""
        with self._guard:
            listeners = list(self._listeners.get(campaign_id, []))
        delivered = 0
        for listener in listeners:
            try:
                listener(message)
                delivered += 1
            except Exception:
                # The edit has already committed; a failing observer only gets logged
                logger.exception("Broadcast listener failed for campaign %s", campaign_id)
        return delivered


def regional_update(ledger_doc: dict[str, Any], events: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": REGIONAL_UPDATE, "ledger": ledger_doc, "events": events}


broadcaster = Broadcaster()
