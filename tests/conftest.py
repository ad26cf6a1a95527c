"""Shared fixtures for the polling core tests."""

import pytest

from config.settings import PollingIntervals
from matchpulse.engine.scheduler import AdaptivePollingScheduler
from matchpulse.lifecycle.sources import ManualLifecycleSource
from matchpulse.lifecycle.tracker import AppLifecycleTracker

from .fakes import CallCounter


@pytest.fixture
def source():
    """Host lifecycle source, starting in the foreground."""
    return ManualLifecycleSource()


@pytest.fixture
def tracker(source):
    return AppLifecycleTracker(source)


@pytest.fixture
def default_intervals():
    """Production tiers (15s / 20s / 30s ...)."""
    return PollingIntervals()


@pytest.fixture
def fast_intervals():
    """Same tiers scaled down to milliseconds so timers fire within a test."""
    return PollingIntervals(
        live_critical_ms=15,
        live_important_ms=20,
        live_active_ms=30,
        live_halftime_ms=120,
        match_not_started_ms=60,
        live_list_ms=30,
        today_fixtures_ms=60,
    )


@pytest.fixture
def scheduler(tracker, fast_intervals):
    """Scheduler whose timers fire in tens of milliseconds."""
    scheduler = AdaptivePollingScheduler(tracker, intervals=fast_intervals)
    yield scheduler
    scheduler.stop_all()


@pytest.fixture
def slow_scheduler(tracker, default_intervals):
    """Scheduler with production tiers (timers never fire during a test)."""
    scheduler = AdaptivePollingScheduler(tracker, intervals=default_intervals)
    yield scheduler
    scheduler.stop_all()


@pytest.fixture
def counter():
    return CallCounter()
