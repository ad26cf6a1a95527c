"""Polling core data models."""

from matchpulse.models.schemas import (
    LifecycleState,
    MatchStatusSnapshot,
    PollTask,
    PollTaskStats,
    PollingStats,
    NOT_STARTED_STATUSES,
    LIVE_STATUSES,
    HALFTIME_STATUSES,
    FINISHED_STATUSES,
    IRREGULAR_STATUSES,
)

__all__ = [
    "LifecycleState",
    "MatchStatusSnapshot",
    "PollTask",
    "PollTaskStats",
    "PollingStats",
    "NOT_STARTED_STATUSES",
    "LIVE_STATUSES",
    "HALFTIME_STATUSES",
    "FINISHED_STATUSES",
    "IRREGULAR_STATUSES",
]
