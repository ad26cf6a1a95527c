"""Interval policy and adaptive polling scheduler."""

from matchpulse.engine.interval_policy import (
    apply_lifecycle,
    compute_effective_interval,
    get_smart_polling_interval,
    is_match_finished,
    is_match_live,
)
from matchpulse.engine.scheduler import AdaptivePollingScheduler

__all__ = [
    "apply_lifecycle",
    "compute_effective_interval",
    "get_smart_polling_interval",
    "is_match_finished",
    "is_match_live",
    "AdaptivePollingScheduler",
]
