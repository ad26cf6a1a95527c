"""
Host-runtime lifecycle signal sources.

A source is the single push-based stream of foreground/background changes
delivered by whatever hosts the app. The tracker keeps at most one
connection open to it.
"""

import asyncio
import signal
from typing import Callable, Optional, Protocol

import structlog

from matchpulse.models.schemas import LifecycleState

logger = structlog.get_logger()

LifecycleHandler = Callable[[LifecycleState], None]


class LifecycleSource(Protocol):
    """Host-runtime lifecycle signal."""

    def current_state(self) -> LifecycleState: ...

    def connect(self, handler: LifecycleHandler) -> Callable[[], None]: ...


class ManualLifecycleSource:
    """
    Lifecycle source driven by the embedding host.

    The host calls `emit()` on every foreground/background change.

    Usage:
        source = ManualLifecycleSource()
        tracker = AppLifecycleTracker(source)
        ...
        source.emit(LifecycleState.BACKGROUND)
    """

    def __init__(self, initial: LifecycleState = LifecycleState.ACTIVE):
        self._state = initial
        self._handlers: list[LifecycleHandler] = []

    @property
    def connection_count(self) -> int:
        """Number of live connections (the tracker should hold at most one)."""
        return len(self._handlers)

    def current_state(self) -> LifecycleState:
        return self._state

    def connect(self, handler: LifecycleHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def disconnect() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return disconnect

    def emit(self, state: LifecycleState) -> None:
        """Deliver a lifecycle change to connected handlers."""
        self._state = state
        for handler in list(self._handlers):
            handler(state)


class SignalLifecycleSource:
    """
    Lifecycle source for POSIX hosts.

    Maps process signals to lifecycle states, e.g. a supervisor sending
    SIGUSR1 when the app's window is hidden and SIGUSR2 when it returns.
    Handlers are installed on the event loop only while connected.
    """

    DEFAULT_SIGNALS = {
        signal.SIGUSR1: LifecycleState.BACKGROUND,
        signal.SIGUSR2: LifecycleState.ACTIVE,
    }

    def __init__(
        self,
        signal_map: Optional[dict[int, LifecycleState]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        initial: LifecycleState = LifecycleState.ACTIVE,
    ):
        self.signal_map = dict(signal_map or self.DEFAULT_SIGNALS)
        self._loop = loop
        self._state = initial
        self.logger = logger.bind(component="signal_lifecycle_source")

    def current_state(self) -> LifecycleState:
        return self._state

    def connect(self, handler: LifecycleHandler) -> Callable[[], None]:
        loop = self._loop or asyncio.get_running_loop()

        def on_signal(state: LifecycleState) -> None:
            self._state = state
            handler(state)

        for sig, state in self.signal_map.items():
            loop.add_signal_handler(sig, on_signal, state)

        self.logger.debug(
            "Signal handlers installed",
            signals=[signal.Signals(s).name for s in self.signal_map],
        )

        def disconnect() -> None:
            for sig in self.signal_map:
                loop.remove_signal_handler(sig)
            self.logger.debug("Signal handlers removed")

        return disconnect
