from __future__ import annotations

from datetime import datetime, timedelta

from customclaude_tui.agent.tools import ToolTracker
from customclaude_tui.models import ToolStatus


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_tracker(clock: FakeClock | None = None) -> ToolTracker:
    counter = iter(range(1000))
    return ToolTracker(clock=clock or FakeClock(), id_factory=lambda: f"tool-{next(counter)}")


class TestToolTracker:
    def test_start_is_starting_and_active(self):
        tracker = make_tracker()
        execution = tracker.start("Bash", "Executing: ls")
        assert execution.status is ToolStatus.STARTING
        assert tracker.active == (execution,)

    def test_two_results_run_then_complete(self):
        clock = FakeClock()
        tracker = make_tracker(clock)
        tracker.start("Bash", "Executing: ls")

        first = tracker.resolve(is_error=False)
        clock.advance(2)
        second = tracker.resolve(is_error=False)

        assert first.status is ToolStatus.RUNNING
        assert second.status is ToolStatus.COMPLETED
        assert second.ended_at == clock.now
        assert tracker.active == ()

    def test_second_result_error_flag_decides_failed(self):
        tracker = make_tracker()
        tracker.start("Bash", "Executing: false")
        tracker.resolve(is_error=False)
        assert tracker.resolve(is_error=True).status is ToolStatus.FAILED

    def test_result_without_active_tool_is_ignored(self):
        tracker = make_tracker()
        assert tracker.resolve(is_error=False) is None
        assert tracker.active == ()

    def test_third_result_after_terminal_is_noop(self):
        tracker = make_tracker()
        tracker.start("Read", "Processing: a.py")
        tracker.resolve(is_error=False)
        tracker.resolve(is_error=False)
        assert tracker.resolve(is_error=True) is None

    def test_latest_started_tool_is_advanced(self):
        clock = FakeClock()
        tracker = make_tracker(clock)
        older = tracker.start("Read", "Processing: a.py")
        clock.advance(1)
        newer = tracker.start("Grep", "Searching: x")

        updated = tracker.resolve(is_error=False)

        assert updated.id == newer.id
        statuses = {e.id: e.status for e in tracker.active}
        assert statuses == {older.id: ToolStatus.STARTING, newer.id: ToolStatus.RUNNING}

    def test_equal_start_times_prefer_last_inserted(self):
        tracker = make_tracker()
        tracker.start("Read", "a")
        second = tracker.start("Read", "b")
        assert tracker.resolve(is_error=False).id == second.id

    def test_reset_clears_active(self):
        tracker = make_tracker()
        tracker.start("Bash", "x")
        tracker.reset()
        assert tracker.active == ()
