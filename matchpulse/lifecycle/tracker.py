"""
App lifecycle tracker.

Single source of truth for whether the app is in the foreground. Observes
the host lifecycle source and rebroadcasts transitions to subscribers.
"""

import itertools
from typing import Callable, Optional

import structlog

from matchpulse.lifecycle.sources import LifecycleSource
from matchpulse.models.schemas import LifecycleState

logger = structlog.get_logger()

LifecycleListener = Callable[[LifecycleState, LifecycleState], None]


class AppLifecycleTracker:
    """
    Observes foreground/background transitions.

    The connection to the host source is opened lazily when the first
    listener subscribes and closed when the last one leaves, so many
    subscribers share exactly one connection.
    """

    def __init__(self, source: LifecycleSource):
        self._source = source
        self._state = source.current_state()

        self._listeners: dict[int, LifecycleListener] = {}
        self._tokens = itertools.count()

        self._ref_count = 0
        self._disconnect: Optional[Callable[[], None]] = None

        self.logger = logger.bind(component="lifecycle_tracker")

    @property
    def listener_count(self) -> int:
        return self._ref_count

    @property
    def is_connected(self) -> bool:
        return self._disconnect is not None

    def get_current_state(self) -> LifecycleState:
        """Get the last observed lifecycle state."""
        return self._state

    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    def is_background(self) -> bool:
        return self._state in (LifecycleState.BACKGROUND, LifecycleState.INACTIVE)

    def subscribe(self, listener: LifecycleListener) -> Callable[[], None]:
        """
        Register a listener for lifecycle transitions.

        Args:
            listener: Called as listener(next_state, previous_state)

        Returns:
            Idempotent unsubscribe function for this listener only
        """
        token = next(self._tokens)
        self._listeners[token] = listener
        self._ref_count += 1

        if self._ref_count == 1:
            self._connect()

        def unsubscribe() -> None:
            if self._listeners.pop(token, None) is None:
                return
            self._ref_count -= 1
            if self._ref_count == 0:
                self._release()

        return unsubscribe

    def has_listener(self, listener: LifecycleListener) -> bool:
        return listener in self._listeners.values()

    def cleanup(self) -> None:
        """
        Drop all listeners and close the host connection.

        Meant for full teardown. Unsubscribe functions handed out earlier
        become no-ops; subscribers that still need transitions must
        subscribe again.
        """
        self._listeners.clear()
        self._ref_count = 0
        self._release()

    def _connect(self) -> None:
        if self._disconnect is not None:
            return
        # Refresh: transitions while disconnected were not observed.
        self._state = self._source.current_state()
        self._disconnect = self._source.connect(self._handle_change)
        self.logger.debug("Connected to host lifecycle", state=self._state.value)

    def _release(self) -> None:
        if self._disconnect is None:
            return
        disconnect, self._disconnect = self._disconnect, None
        disconnect()
        self.logger.debug("Disconnected from host lifecycle")

    def _handle_change(self, next_state: LifecycleState) -> None:
        previous = self._state
        if next_state == previous:
            self.logger.debug("Duplicate lifecycle signal ignored", state=next_state.value)
            return

        self._state = next_state
        self.logger.info(
            "Lifecycle transition",
            previous=previous.value,
            next=next_state.value,
        )

        for listener in list(self._listeners.values()):
            try:
                listener(next_state, previous)
            except Exception as e:
                self.logger.error("Lifecycle listener error", error=str(e))
