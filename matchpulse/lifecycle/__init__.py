"""
App lifecycle tracking.

- sources: host-runtime lifecycle signals (manual push, POSIX signals)
- tracker: ref-counted observer that rebroadcasts transitions
"""

from matchpulse.lifecycle.sources import (
    LifecycleSource,
    ManualLifecycleSource,
    SignalLifecycleSource,
)
from matchpulse.lifecycle.tracker import AppLifecycleTracker

__all__ = [
    "LifecycleSource",
    "ManualLifecycleSource",
    "SignalLifecycleSource",
    "AppLifecycleTracker",
]
