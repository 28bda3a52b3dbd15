import asyncio
from collections import Counter

import pytest

from pingtopass.services.exam_timer import ExamTimer, TimerState, format_time


def _record_events(timer: ExamTimer) -> Counter:
    counts = Counter()
    for event in ("started", "paused", "resumed", "reset", "state-changed",
                  "tick", "warning", "critical-warning", "time-up"):
        timer.on(event, lambda payload, name=event: counts.update([name]))
    return counts


def _run(coro):
    """Run a coroutine without pytest-asyncio."""
    return asyncio.run(coro)


class TestFormatTime:
    def test_minutes_and_seconds(self):
        assert format_time(125) == "2:05"
        assert format_time(3600) == "60:00"
        assert format_time(7) == "0:07"

    def test_negative_is_zero(self):
        assert format_time(-5) == "0:00"


class TestTransitions:
    def test_initial_state(self):
        timer = ExamTimer(90)
        assert timer.state == TimerState.IDLE
        assert timer.remaining == 90
        assert timer.formatted_time == "1:30"

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            ExamTimer(0)

    def test_start_pause_resume(self):
        timer = ExamTimer(10)
        events = _record_events(timer)

        assert timer.start() is True
        assert timer.state == TimerState.RUNNING
        assert timer.start() is False

        assert timer.pause() is True
        assert timer.state == TimerState.PAUSED
        assert timer.pause() is False

        assert timer.resume() is True
        assert timer.state == TimerState.RUNNING
        assert events["started"] == 1
        assert events["paused"] == 1
        assert events["resumed"] == 1
        assert events["state-changed"] == 3

    def test_resume_requires_paused(self):
        timer = ExamTimer(10)
        assert timer.resume() is False
        assert timer.state == TimerState.IDLE

    def test_ticks_are_ignored_unless_running(self):
        timer = ExamTimer(10)
        timer.tick()
        assert timer.remaining == 10

        timer.start()
        timer.tick()
        timer.pause()
        timer.tick()
        assert timer.remaining == 9

    def test_reset_restores_duration_and_warnings(self):
        timer = ExamTimer(5, warning_threshold=4, critical_threshold=2)
        events = _record_events(timer)
        timer.start()
        for _ in range(3):
            timer.tick()
        assert events["warning"] == 1

        assert timer.reset() is True
        assert timer.state == TimerState.IDLE
        assert timer.remaining == 5
        assert events["reset"] == 1

        timer.start()
        for _ in range(3):
            timer.tick()
        assert events["warning"] == 2
        assert events["critical-warning"] == 2


class TestCountdown:
    def test_time_up_after_duration_ticks(self):
        timer = ExamTimer(5)
        events = _record_events(timer)
        timer.start()

        for _ in range(5):
            timer.tick()

        assert timer.state == TimerState.FINISHED
        assert timer.remaining == 0
        assert timer.finished.is_set()
        assert events["tick"] == 5
        assert events["time-up"] == 1

    def test_finished_is_terminal(self):
        timer = ExamTimer(2)
        events = _record_events(timer)
        timer.start()
        timer.tick()
        timer.tick()

        timer.tick()
        assert timer.start() is False
        assert timer.reset() is False
        assert timer.state == TimerState.FINISHED
        assert events["time-up"] == 1

    def test_thresholds_fire_once_each(self):
        timer = ExamTimer(400)
        events = _record_events(timer)
        timer.start()

        for _ in range(400):
            timer.tick()

        assert events["warning"] == 1
        assert events["critical-warning"] == 1
        assert events["time-up"] == 1

    def test_warning_fires_at_threshold(self):
        timer = ExamTimer(302)
        remaining_at_warning = []
        timer.on("warning", lambda payload: remaining_at_warning.append(payload["remaining"]))
        timer.start()

        timer.tick()
        assert remaining_at_warning == []
        timer.tick()
        assert remaining_at_warning == [300]

    def test_custom_thresholds(self):
        timer = ExamTimer(600, warning_threshold=180, critical_threshold=30)
        seen = []
        timer.on("warning", lambda payload: seen.append(("warning", payload["remaining"])))
        timer.on("critical-warning", lambda payload: seen.append(("critical", payload["remaining"])))
        timer.start()
        for _ in range(600):
            timer.tick()
        assert seen == [("warning", 180), ("critical", 30)]


class TestAsyncCountdown:
    def test_runs_to_completion_on_the_loop(self):
        async def fake_sleep(_seconds):
            await asyncio.sleep(0)

        async def scenario():
            timer = ExamTimer(5, sleep=fake_sleep)
            events = _record_events(timer)
            timer.start()
            await asyncio.wait_for(timer.wait(), timeout=5)
            return timer, events

        timer, events = _run(scenario())
        assert timer.state == TimerState.FINISHED
        assert events["tick"] == 5
        assert events["time-up"] == 1

    def test_pause_stops_the_countdown(self):
        async def fake_sleep(_seconds):
            await asyncio.sleep(0)

        async def scenario():
            timer = ExamTimer(50, sleep=fake_sleep)
            ticks = []
            timer.on("tick", lambda payload: ticks.append(payload["remaining"]))
            timer.start()
            while len(ticks) < 3:
                await asyncio.sleep(0)
            timer.pause()
            paused_at = timer.remaining
            for _ in range(20):
                await asyncio.sleep(0)
            return timer, paused_at

        timer, paused_at = _run(scenario())
        assert timer.state == TimerState.PAUSED
        assert timer.remaining == paused_at

    def test_close_cancels_the_task(self):
        async def fake_sleep(_seconds):
            await asyncio.sleep(0)

        async def scenario():
            timer = ExamTimer(50, sleep=fake_sleep)
            timer.start()
            await asyncio.sleep(0)
            timer.close()
            before = timer.remaining
            for _ in range(20):
                await asyncio.sleep(0)
            return timer, before

        timer, before = _run(scenario())
        assert timer.remaining == before

    def test_close_leaves_a_resumable_timer(self):
        async def fake_sleep(_seconds):
            await asyncio.sleep(0)

        async def scenario():
            timer = ExamTimer(3, sleep=fake_sleep)
            timer.start()
            await asyncio.sleep(0)
            timer.close()
            state_after_close = timer.state
            assert timer.resume() is True
            await asyncio.wait_for(timer.wait(), timeout=5)
            return timer, state_after_close

        timer, state_after_close = _run(scenario())
        assert state_after_close == TimerState.PAUSED
        assert timer.state == TimerState.FINISHED
