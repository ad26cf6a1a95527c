"""
Interval-selection policy.

Pure functions mapping (match status, minute, lifecycle state) to the
next polling delay. A return value of None is the "do not reschedule"
sentinel used for finished and irregular matches.
"""

from typing import Optional

from config.settings import PollingIntervals, settings
from matchpulse.models.schemas import (
    FINISHED_STATUSES,
    HALFTIME_STATUSES,
    IRREGULAR_STATUSES,
    LIVE_STATUSES,
    NOT_STARTED_STATUSES,
    LifecycleState,
    MatchStatusSnapshot,
)


def is_match_live(status: str) -> bool:
    """Match is in play or at halftime."""
    return status in LIVE_STATUSES or status in HALFTIME_STATUSES


def is_match_finished(status: str) -> bool:
    """Match is over, or stopped for good (abandoned, postponed, ...)."""
    return status in FINISHED_STATUSES or status in IRREGULAR_STATUSES


def get_smart_polling_interval(
    status: str,
    minute: int = 0,
    intervals: Optional[PollingIntervals] = None,
) -> Optional[int]:
    """
    Pick a polling interval for a match status.

    Args:
        status: Football API short status code (e.g. "1H", "HT", "FT")
        minute: Minutes elapsed in the match
        intervals: Interval tiers (defaults to global settings)

    Returns:
        Interval in ms, or None when the match needs no further polling
    """
    intervals = intervals or settings.polling

    if is_match_finished(status):
        return None

    if status in NOT_STARTED_STATUSES:
        return intervals.match_not_started_ms

    if status in HALFTIME_STATUSES:
        return intervals.live_halftime_ms

    if status in LIVE_STATUSES:
        minute = minute or 0
        if minute >= intervals.critical_minute:
            return intervals.live_critical_ms
        if minute >= intervals.important_minute:
            return intervals.live_important_ms
        return intervals.live_active_ms

    # Unknown status
    return intervals.live_active_ms


def apply_lifecycle(
    interval_ms: Optional[int],
    lifecycle_state: LifecycleState,
    pause_in_background: bool,
    intervals: Optional[PollingIntervals] = None,
) -> Optional[int]:
    """Slow an interval down while backgrounded; the sentinel passes through."""
    if interval_ms is None:
        return None

    intervals = intervals or settings.polling
    if pause_in_background and not lifecycle_state.is_foreground:
        return interval_ms * intervals.background_multiplier
    return interval_ms


def compute_effective_interval(
    base_interval_ms: int,
    snapshot: Optional[MatchStatusSnapshot],
    lifecycle_state: LifecycleState,
    pause_in_background: bool = True,
    intervals: Optional[PollingIntervals] = None,
) -> Optional[int]:
    """
    Full policy: status tier (or base interval) then background slowdown.

    Args:
        base_interval_ms: Task's nominal cadence, used when snapshot is None
        snapshot: Current match status, if the task tracks a match
        lifecycle_state: Current app lifecycle state
        pause_in_background: Whether the task opted into background slowdown
        intervals: Interval tiers (defaults to global settings)

    Returns:
        Effective interval in ms, or None (do not reschedule)
    """
    if snapshot is None:
        interval = base_interval_ms
    else:
        interval = get_smart_polling_interval(snapshot.status, snapshot.minute, intervals)

    return apply_lifecycle(interval, lifecycle_state, pause_in_background, intervals)
