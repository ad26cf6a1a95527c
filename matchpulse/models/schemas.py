"""
Data models for the polling core.

Defines:
- App lifecycle states reported by the host runtime
- Football match status codes and their polling groups
- Registered poll tasks (owned by the scheduler)
- Diagnostics snapshots (pydantic, for logging/serialization)
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, Field


class LifecycleState(str, Enum):
    """Foreground/background state of the hosting application."""
    ACTIVE = "active"
    BACKGROUND = "background"
    INACTIVE = "inactive"

    @property
    def is_foreground(self) -> bool:
        return self is LifecycleState.ACTIVE


# --- Match status codes (football API short codes) ---

NOT_STARTED_STATUSES = frozenset({"NS", "TBD"})
LIVE_STATUSES = frozenset({"1H", "2H", "ET", "BT", "P"})
HALFTIME_STATUSES = frozenset({"HT"})
FINISHED_STATUSES = frozenset({"FT", "AET", "PEN"})
IRREGULAR_STATUSES = frozenset({"SUSP", "INT", "PST", "CANC", "ABD", "AWD", "WO"})


@dataclass(frozen=True)
class MatchStatusSnapshot:
    """Point-in-time match status as seen by the UI layer."""
    status: str
    minute: int = 0


PollCallback = Callable[[], Union[None, Awaitable[Any]]]
MatchStatusProvider = Callable[[], MatchStatusSnapshot]


@dataclass
class PollTask:
    """
    A registered recurring job.

    Mutated in place by the scheduler whenever its effective interval is
    recomputed. `timer_handle` is owned exclusively by the scheduler and is
    None while the task is not armed (paused or finished match).
    """
    task_id: str
    callback: PollCallback
    base_interval_ms: int
    match_status_provider: Optional[MatchStatusProvider] = None
    pause_in_background: bool = True

    timer_handle: Optional[asyncio.TimerHandle] = None
    current_interval_ms: Optional[int] = None
    # Reserved for explicit caller-driven suspension; lifecycle never sets it.
    is_paused: bool = False

    # Counters
    tick_count: int = 0
    error_count: int = 0

    @property
    def is_armed(self) -> bool:
        return self.timer_handle is not None and not self.timer_handle.cancelled()


# --- Diagnostics ---

class PollTaskStats(BaseModel):
    """Read-only view of one registered task."""
    task_id: str
    interval_ms: Optional[int] = None  # None = not rescheduled (finished/paused)
    is_paused: bool = False
    pause_in_background: bool = True
    tick_count: int = 0
    error_count: int = 0


class PollingStats(BaseModel):
    """Scheduler diagnostics snapshot."""
    active_task_count: int = 0
    lifecycle_state: LifecycleState = LifecycleState.ACTIVE
    intervals: dict[str, Optional[int]] = Field(default_factory=dict)
    tasks: list[PollTaskStats] = Field(default_factory=list)
