"""
Win signal - single-slot publish/subscribe channel exposed by sessions.

Delivery is fire-and-forget from the engine's side. Listeners may be
called more than once for the same game; ignoring duplicates is their job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from whoami.models.game import WinEvent

logger = logging.getLogger(__name__)

WinListener = Callable[[WinEvent], None]


class WinSignal:
    """Broadcasts WinEvents to any number of listeners.

    Example:
        >>> signal = WinSignal()
        >>> seen = []
        >>> unsubscribe = signal.subscribe(seen.append)
        >>> signal.emit(WinEvent(epoch=1))
        >>> len(seen)
        1
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._listeners: list[WinListener] = []
        self.last_event: WinEvent | None = None

    def subscribe(self, listener: WinListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: WinEvent) -> None:
        """Deliver an event to every listener.

        A failing listener is logged and does not stop delivery to the rest.
        """
        self.last_event = event
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Win listener failed: {type(e).__name__}: {e}")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
