"""
Adaptive polling scheduler.

Runs named callbacks on a cadence that adapts to match urgency and to the
app's foreground/background state:
- Live matches poll faster as they approach added time
- Backgrounded apps poll slower (never stopped)
- Finished matches stop rescheduling

Ticks are fire-and-forget event-loop timers. A callback that is async and
slower than its own interval may overlap with itself; guarding that is the
caller's job.
"""

import asyncio
import inspect
from functools import partial
from typing import Any, Callable, Mapping, Optional

import structlog

from config.settings import PollingIntervals, settings
from matchpulse.engine.interval_policy import compute_effective_interval
from matchpulse.lifecycle.tracker import AppLifecycleTracker
from matchpulse.models.schemas import (
    LifecycleState,
    MatchStatusProvider,
    MatchStatusSnapshot,
    PollCallback,
    PollingStats,
    PollTask,
    PollTaskStats,
)

logger = structlog.get_logger()


MINUTE_KEYS = ("minute_elapsed", "minuteElapsed", "minute")


def _coerce_snapshot(value: Any) -> MatchStatusSnapshot:
    """
    Accept a snapshot or a status mapping from providers.

    Mappings carry `status` plus the elapsed minute under one of
    MINUTE_KEYS; a mapping without either raises KeyError.
    """
    if isinstance(value, MatchStatusSnapshot):
        return value
    if isinstance(value, Mapping):
        for key in MINUTE_KEYS:
            if key in value:
                minute = value[key]
                break
        else:
            raise KeyError(f"Match status has no elapsed minute: {value!r}")
        return MatchStatusSnapshot(
            status=str(value["status"]),
            minute=int(minute or 0),
        )
    raise TypeError(f"Unsupported match status: {value!r}")


class AdaptivePollingScheduler:
    """
    Registry of named polling tasks.

    Usage:
        tracker = AppLifecycleTracker(ManualLifecycleSource())
        scheduler = AdaptivePollingScheduler(tracker)

        stop = scheduler.start(
            "live_match_detail_1035",
            fetch_live_data,
            base_interval_ms=30_000,
            match_status_provider=holder.snapshot,
        )
        ...
        stop()

    At most one timer is armed per task id. Re-registering an id cancels
    the previous timer before the new task is created.
    """

    def __init__(
        self,
        tracker: AppLifecycleTracker,
        intervals: Optional[PollingIntervals] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.tracker = tracker
        self.intervals = intervals or settings.polling
        self._loop = loop

        self._tasks: dict[str, PollTask] = {}
        self._lifecycle_unsubscribe: Optional[Callable[[], None]] = None

        # Strong refs to running async callbacks
        self._inflight: set[asyncio.Future] = set()

        self.logger = logger.bind(component="polling_scheduler")

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def active_task_count(self) -> int:
        return len(self._tasks)

    @property
    def task_ids(self) -> list[str]:
        return list(self._tasks)

    def has_task(self, task_id: str) -> bool:
        return task_id in self._tasks

    def get_task(self, task_id: str) -> Optional[PollTask]:
        return self._tasks.get(task_id)

    def current_interval(self, task_id: str) -> Optional[int]:
        """Effective interval of an armed task, None if unknown or not rescheduled."""
        task = self._tasks.get(task_id)
        return task.current_interval_ms if task else None

    def start(
        self,
        task_id: str,
        callback: PollCallback,
        *,
        base_interval_ms: Optional[int] = None,
        match_status_provider: Optional[MatchStatusProvider] = None,
        pause_in_background: bool = True,
        run_immediately: bool = True,
    ) -> Callable[[], None]:
        """
        Register (or replace) a polling task.

        Args:
            task_id: Unique task key
            callback: Zero-arg callable, sync or returning an awaitable
            base_interval_ms: Nominal cadence (defaults to the live tier)
            match_status_provider: Returns the tracked match's status
            pause_in_background: Slow the task down while backgrounded
            run_immediately: Invoke the callback once before the first timer

        Returns:
            Function that stops this task
        """
        if not task_id:
            raise ValueError("task_id must be a non-empty string")
        if not callable(callback):
            raise ValueError("callback must be callable")
        if base_interval_ms is None:
            base_interval_ms = self.intervals.live_active_ms
        if base_interval_ms <= 0:
            raise ValueError("base_interval_ms must be positive")

        # Raises RuntimeError outside a running loop, before anything is registered
        self._get_loop()

        previous = self._tasks.pop(task_id, None)
        if previous is not None:
            self._cancel_timer(previous)
            self.logger.info("Polling task replaced", task_id=task_id)

        task = PollTask(
            task_id=task_id,
            callback=callback,
            base_interval_ms=base_interval_ms,
            match_status_provider=match_status_provider,
            pause_in_background=pause_in_background,
        )
        self._tasks[task_id] = task
        self._acquire_lifecycle()

        self.logger.debug(
            "Polling task started",
            task_id=task_id,
            base_interval_ms=base_interval_ms,
            tracks_match=match_status_provider is not None,
            pause_in_background=pause_in_background,
        )

        if run_immediately:
            self._execute_callback(task)

        self._arm(task)

        return partial(self.stop, task_id)

    def stop(self, task_id: str) -> None:
        """Cancel a task's timer and remove it. Unknown ids are a no-op."""
        task = self._tasks.pop(task_id, None)
        if task is not None:
            self._cancel_timer(task)
            self.logger.debug("Polling task stopped", task_id=task_id)

        if not self._tasks:
            self._release_lifecycle()

    def stop_all(self) -> None:
        """Stop every registered task."""
        for task_id in list(self._tasks):
            self.stop(task_id)

    def update_interval(self, task_id: str) -> None:
        """Recompute a task's interval and re-arm its timer. Unknown ids are a no-op."""
        task = self._tasks.get(task_id)
        if task is None:
            return
        self._arm(task)

    def stats(self) -> PollingStats:
        """Read-only diagnostics snapshot."""
        tasks = [
            PollTaskStats(
                task_id=task.task_id,
                interval_ms=task.current_interval_ms,
                is_paused=task.is_paused,
                pause_in_background=task.pause_in_background,
                tick_count=task.tick_count,
                error_count=task.error_count,
            )
            for task in self._tasks.values()
        ]
        return PollingStats(
            active_task_count=len(self._tasks),
            lifecycle_state=self.tracker.get_current_state(),
            intervals={t.task_id: t.interval_ms for t in tasks},
            tasks=tasks,
        )

    async def wait_inflight(self) -> None:
        """Wait for async callbacks already started (e.g. at shutdown)."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # =========================================================================
    # Timers
    # =========================================================================

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _cancel_timer(self, task: PollTask) -> None:
        if task.timer_handle is not None:
            task.timer_handle.cancel()
            task.timer_handle = None

    def _arm(self, task: PollTask) -> None:
        """Cancel the current timer, then arm a new one at the recomputed interval."""
        self._cancel_timer(task)

        if self._tasks.get(task.task_id) is not task or task.is_paused:
            return

        previous_interval = task.current_interval_ms
        interval = self._calculate_interval(task)
        task.current_interval_ms = interval

        if interval is None:
            self.logger.info("Match finished, polling not rescheduled", task_id=task.task_id)
            return

        task.timer_handle = self._get_loop().call_later(
            interval / 1000,
            self._on_tick,
            task,
        )

        if interval != previous_interval:
            self.logger.debug(
                "Polling interval set",
                task_id=task.task_id,
                interval_ms=interval,
                previous_ms=previous_interval,
                lifecycle_state=self.tracker.get_current_state().value,
            )

    def _on_tick(self, task: PollTask) -> None:
        # Superseded or stopped tasks never tick.
        if self._tasks.get(task.task_id) is not task:
            return
        task.timer_handle = None

        self._execute_callback(task)
        self._arm(task)

    def _calculate_interval(self, task: PollTask) -> Optional[int]:
        snapshot = None
        if task.match_status_provider is not None:
            try:
                snapshot = _coerce_snapshot(task.match_status_provider())
            except Exception as e:
                # Base interval for this tick only; the provider is asked again next tick.
                self.logger.warning(
                    "Match status provider failed, using base interval",
                    task_id=task.task_id,
                    error=str(e),
                )

        return compute_effective_interval(
            task.base_interval_ms,
            snapshot,
            self.tracker.get_current_state(),
            task.pause_in_background,
            self.intervals,
        )

    # =========================================================================
    # Callbacks
    # =========================================================================

    def _execute_callback(self, task: PollTask) -> None:
        if task.is_paused:
            return

        task.tick_count += 1
        try:
            result = task.callback()
        except Exception as e:
            task.error_count += 1
            self.logger.error("Polling callback error", task_id=task.task_id, error=str(e))
            return

        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result, loop=self._get_loop())
            self._inflight.add(future)
            future.add_done_callback(partial(self._on_callback_done, task))

    def _on_callback_done(self, task: PollTask, future: asyncio.Future) -> None:
        self._inflight.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            task.error_count += 1
            self.logger.error("Polling callback error", task_id=task.task_id, error=str(error))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _acquire_lifecycle(self) -> None:
        if self._lifecycle_unsubscribe is not None and not self.tracker.has_listener(
            self._handle_lifecycle_change
        ):
            # Tracker was cleaned up underneath us
            self._lifecycle_unsubscribe = None
            self.logger.warning("Lifecycle subscription lost, resubscribing")
        if self._lifecycle_unsubscribe is None:
            self._lifecycle_unsubscribe = self.tracker.subscribe(self._handle_lifecycle_change)
            self.logger.debug("Lifecycle subscription acquired")

    def _release_lifecycle(self) -> None:
        if self._lifecycle_unsubscribe is not None:
            unsubscribe, self._lifecycle_unsubscribe = self._lifecycle_unsubscribe, None
            unsubscribe()
            self.logger.debug("Lifecycle subscription released")

    def _handle_lifecycle_change(
        self,
        next_state: LifecycleState,
        previous_state: LifecycleState,
    ) -> None:
        # Tasks registered while this runs are picked up by the next transition.
        tasks = list(self._tasks.values())

        if next_state.is_foreground and not previous_state.is_foreground:
            # Back to foreground: speed up and refresh right away.
            for task in tasks:
                if self._tasks.get(task.task_id) is not task:
                    continue
                self._arm(task)
                if task.is_armed:
                    self._execute_callback(task)

        elif previous_state.is_foreground and not next_state.is_foreground:
            # To background: slow down (instead of stopping).
            for task in tasks:
                if self._tasks.get(task.task_id) is not task:
                    continue
                if task.pause_in_background:
                    self._arm(task)
