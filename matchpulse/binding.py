"""
Helpers for view code that drives the scheduler.

Views register a task when they become active and remove it on teardown,
supplying status providers that read their own local state.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from matchpulse.engine.interval_policy import is_match_finished, is_match_live
from matchpulse.engine.scheduler import AdaptivePollingScheduler
from matchpulse.lifecycle.tracker import AppLifecycleTracker
from matchpulse.models.schemas import (
    LifecycleState,
    MatchStatusProvider,
    MatchStatusSnapshot,
    PollCallback,
)


class MatchStatusHolder:
    """
    Latest known status of one fixture.

    `snapshot` is a ready-made match status provider for the scheduler.
    """

    def __init__(self, status: str = "NS", minute: int = 0):
        self.status = status
        self.minute = minute

    def update(self, status: str, minute: Optional[int] = None) -> None:
        self.status = status
        self.minute = minute or 0

    def update_from_fixture(self, payload: Mapping[str, Any]) -> None:
        """
        Update from a football API fixture payload.

        Reads fixture.status.short and fixture.status.elapsed; missing
        fields leave the current values in place.
        """
        status = (payload.get("fixture") or {}).get("status") or {}
        short = status.get("short")
        if short:
            self.status = short
        elapsed = status.get("elapsed")
        if elapsed is not None:
            self.minute = int(elapsed)

    @property
    def is_live(self) -> bool:
        return is_match_live(self.status)

    @property
    def is_finished(self) -> bool:
        return is_match_finished(self.status)

    def snapshot(self) -> MatchStatusSnapshot:
        return MatchStatusSnapshot(status=self.status, minute=self.minute)


@contextmanager
def smart_polling(
    scheduler: AdaptivePollingScheduler,
    task_id: str,
    callback: PollCallback,
    *,
    enabled: bool = True,
    base_interval_ms: Optional[int] = None,
    match_status_provider: Optional[MatchStatusProvider] = None,
    pause_in_background: bool = True,
) -> Iterator[Optional[Callable[[], None]]]:
    """
    Poll for the lifetime of a `with` block.

    A disabled binding makes sure no task is left running under `task_id`
    and yields None.

    Usage:
        with smart_polling(scheduler, f"live_match_detail_{fixture_id}", refresh,
                           enabled=not holder.is_finished,
                           match_status_provider=holder.snapshot):
            await view_closed.wait()
    """
    if not enabled:
        scheduler.stop(task_id)
        yield None
        return

    stop = scheduler.start(
        task_id,
        callback,
        base_interval_ms=base_interval_ms,
        match_status_provider=match_status_provider,
        pause_in_background=pause_in_background,
        run_immediately=True,
    )
    try:
        yield stop
    finally:
        stop()


def live_list_polling(
    scheduler: AdaptivePollingScheduler,
    task_id: str,
    callback: PollCallback,
    **kwargs: Any,
):
    """smart_polling on the live-matches list cadence."""
    kwargs.setdefault("base_interval_ms", scheduler.intervals.live_list_ms)
    return smart_polling(scheduler, task_id, callback, **kwargs)


def today_fixtures_polling(
    scheduler: AdaptivePollingScheduler,
    task_id: str,
    callback: PollCallback,
    **kwargs: Any,
):
    """smart_polling on the today's-fixtures cadence."""
    kwargs.setdefault("base_interval_ms", scheduler.intervals.today_fixtures_ms)
    return smart_polling(scheduler, task_id, callback, **kwargs)


def watch_app_state(
    tracker: AppLifecycleTracker,
    on_foreground: Optional[Callable[[], None]] = None,
    on_background: Optional[Callable[[], None]] = None,
) -> Callable[[], None]:
    """
    Call hooks when the app enters or leaves the foreground.

    Returns:
        Unsubscribe function
    """

    def listener(next_state: LifecycleState, previous_state: LifecycleState) -> None:
        if next_state.is_foreground and not previous_state.is_foreground:
            if on_foreground:
                on_foreground()
        elif previous_state.is_foreground and not next_state.is_foreground:
            if on_background:
                on_background()

    return tracker.subscribe(listener)
