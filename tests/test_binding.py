"""Tests for the view binding helpers."""

import pytest

from matchpulse.binding import (
    MatchStatusHolder,
    live_list_polling,
    smart_polling,
    today_fixtures_polling,
    watch_app_state,
)
from matchpulse.models.schemas import LifecycleState


class TestSmartPolling:
    """Tests for the smart_polling context manager."""

    @pytest.mark.asyncio
    async def test_polls_for_block_lifetime(self, slow_scheduler, counter):
        with smart_polling(slow_scheduler, "live_matches_list", counter) as stop:
            assert stop is not None
            assert slow_scheduler.has_task("live_matches_list")
            assert counter.calls == 1

        assert not slow_scheduler.has_task("live_matches_list")

    @pytest.mark.asyncio
    async def test_stops_on_error(self, slow_scheduler, counter):
        with pytest.raises(RuntimeError):
            with smart_polling(slow_scheduler, "m1", counter):
                raise RuntimeError("view crashed")

        assert slow_scheduler.active_task_count == 0

    @pytest.mark.asyncio
    async def test_disabled_stops_existing_task(self, slow_scheduler, counter):
        slow_scheduler.start("live_match_detail_7", counter)

        with smart_polling(slow_scheduler, "live_match_detail_7", counter, enabled=False) as stop:
            assert stop is None
            assert not slow_scheduler.has_task("live_match_detail_7")

    @pytest.mark.asyncio
    async def test_holder_drives_interval(self, slow_scheduler, counter):
        holder = MatchStatusHolder("2H", 76)

        with smart_polling(
            slow_scheduler,
            "live_match_detail_7",
            counter,
            base_interval_ms=30_000,
            match_status_provider=holder.snapshot,
        ):
            assert slow_scheduler.current_interval("live_match_detail_7") == 20_000

            holder.update("FT", 90)
            slow_scheduler.update_interval("live_match_detail_7")
            assert slow_scheduler.current_interval("live_match_detail_7") is None


class TestPollingPresets:
    """Tests for the list/fixtures cadence presets."""

    @pytest.mark.asyncio
    async def test_live_list_uses_configured_cadence(self, slow_scheduler, counter):
        slow_scheduler.intervals.live_list_ms = 25_000

        with live_list_polling(slow_scheduler, "live_matches_list", counter):
            assert slow_scheduler.current_interval("live_matches_list") == 25_000

        assert not slow_scheduler.has_task("live_matches_list")

    @pytest.mark.asyncio
    async def test_today_fixtures_uses_configured_cadence(self, source, slow_scheduler, counter):
        with today_fixtures_polling(slow_scheduler, "today_fixtures", counter):
            assert slow_scheduler.current_interval("today_fixtures") == 60_000

            source.emit(LifecycleState.BACKGROUND)
            assert slow_scheduler.current_interval("today_fixtures") == 180_000

    @pytest.mark.asyncio
    async def test_explicit_base_interval_wins(self, slow_scheduler, counter):
        with today_fixtures_polling(slow_scheduler, "today_fixtures", counter, base_interval_ms=5_000):
            assert slow_scheduler.current_interval("today_fixtures") == 5_000


class TestWatchAppState:
    """Tests for foreground/background hooks."""

    def test_hooks_fire_on_edges(self, source, tracker):
        events = []
        unsubscribe = watch_app_state(
            tracker,
            on_foreground=lambda: events.append("fg"),
            on_background=lambda: events.append("bg"),
        )

        source.emit(LifecycleState.INACTIVE)
        source.emit(LifecycleState.BACKGROUND)
        source.emit(LifecycleState.ACTIVE)

        assert events == ["bg", "fg"]

        unsubscribe()
        source.emit(LifecycleState.BACKGROUND)
        assert events == ["bg", "fg"]

    def test_missing_hooks_are_skipped(self, source, tracker):
        events = []
        watch_app_state(tracker, on_foreground=lambda: events.append("fg"))

        source.emit(LifecycleState.BACKGROUND)
        source.emit(LifecycleState.ACTIVE)

        assert events == ["fg"]


class TestMatchStatusHolder:
    """Tests for MatchStatusHolder."""

    def test_update_from_fixture(self):
        holder = MatchStatusHolder()
        holder.update_from_fixture({"fixture": {"id": 1035, "status": {"short": "2H", "elapsed": 67}}})

        snapshot = holder.snapshot()
        assert snapshot.status == "2H"
        assert snapshot.minute == 67
        assert holder.is_live
        assert not holder.is_finished

    def test_partial_payload_keeps_values(self):
        holder = MatchStatusHolder("1H", 30)
        holder.update_from_fixture({"fixture": {"status": {"short": "HT", "elapsed": None}}})
        holder.update_from_fixture({})

        assert (holder.status, holder.minute) == ("HT", 30)

    def test_finished(self):
        holder = MatchStatusHolder()
        holder.update("AET", None)

        assert holder.is_finished
        assert holder.minute == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
