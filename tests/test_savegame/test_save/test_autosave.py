import threading

import pytest

from savegame.save.autosave import AutoSaveScheduler


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        AutoSaveScheduler(0, lambda: None)


def test_tick_runs_callback():
    calls = []
    scheduler = AutoSaveScheduler(60, lambda: calls.append(1))

    scheduler.tick()

    assert calls == [1]
    assert scheduler.tick_count == 1


def test_failing_tick_is_logged_and_next_tick_runs(caplog):
    calls = []

    def callback():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("disk full")

    scheduler = AutoSaveScheduler(60, callback)
    scheduler.tick()
    scheduler.tick()

    assert len(calls) == 2
    assert "Error during auto-save" in caplog.text


def test_timer_fires_until_stopped():
    fired = threading.Event()
    scheduler = AutoSaveScheduler(0.01, fired.set)

    scheduler.start()
    assert scheduler.is_running
    assert fired.wait(timeout=2.0)

    scheduler.stop()
    assert not scheduler.is_running


def test_start_twice_keeps_one_thread():
    scheduler = AutoSaveScheduler(60, lambda: None)
    scheduler.start()
    first = scheduler._thread
    scheduler.start()

    assert scheduler._thread is first
    scheduler.stop()


def test_stop_without_start():
    AutoSaveScheduler(60, lambda: None).stop()


def test_restart_after_stop():
    fired = threading.Event()
    scheduler = AutoSaveScheduler(0.01, fired.set)
    scheduler.start()
    scheduler.stop()
    fired.clear()

    scheduler.start()
    assert fired.wait(timeout=2.0)
    scheduler.stop()
