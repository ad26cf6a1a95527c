"""
MatchPulse - adaptive live-score polling core.

Keeps live football data fresh without wasting requests:
- lifecycle/: host foreground/background tracking
- engine/: interval policy and the adaptive polling scheduler
- models/: lifecycle states, match statuses, tasks, diagnostics
- binding: helpers for views that start/stop polling

Polling tightens as a tracked match approaches added time (30s -> 20s -> 15s),
slows 3x while the app is backgrounded, and stops rescheduling once the
match is finished.
"""

from matchpulse.engine import AdaptivePollingScheduler
from matchpulse.lifecycle import AppLifecycleTracker, ManualLifecycleSource
from matchpulse.models import LifecycleState, MatchStatusSnapshot

__version__ = "0.1.0"

__all__ = [
    "AdaptivePollingScheduler",
    "AppLifecycleTracker",
    "ManualLifecycleSource",
    "LifecycleState",
    "MatchStatusSnapshot",
]
