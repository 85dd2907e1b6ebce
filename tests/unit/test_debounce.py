from __future__ import annotations

import asyncio

import pytest

from src.utils.debounce import DebounceState, ManualScheduler, schedule_debounced


def test_burst_of_keystrokes_fires_once_after_last() -> None:
    scheduler = ManualScheduler()
    value = {"text": ""}
    fired: list[tuple[float, str]] = []
    debounced = schedule_debounced(lambda: fired.append((scheduler.now, value["text"])), 0.5, scheduler=scheduler)

    for t, text in [(0.0, "s"), (0.1, "sp"), (0.2, "spa")]:
        scheduler.advance(t - scheduler.now)
        value["text"] = text
        debounced()
        assert scheduler.pending == 1

    scheduler.advance(0.49)
    assert fired == []
    assert debounced.state is DebounceState.PENDING

    scheduler.advance(1.0)
    assert fired == [(pytest.approx(0.7), "spa")]
    assert debounced.state is DebounceState.FIRED
    assert scheduler.pending == 0


def test_spaced_triggers_fire_separately() -> None:
    scheduler = ManualScheduler()
    fired: list[float] = []
    debounced = schedule_debounced(lambda: fired.append(scheduler.now), 0.5, scheduler=scheduler)

    debounced.trigger()
    scheduler.advance(0.6)
    debounced.trigger()
    scheduler.advance(0.6)

    assert fired == [pytest.approx(0.5), pytest.approx(1.1)]


def test_cancel_returns_to_idle() -> None:
    scheduler = ManualScheduler()
    fired: list[float] = []
    debounced = schedule_debounced(lambda: fired.append(scheduler.now), 0.5, scheduler=scheduler)

    assert debounced.state is DebounceState.IDLE
    debounced.trigger()
    debounced.cancel()
    scheduler.advance(5)

    assert fired == []
    assert debounced.state is DebounceState.IDLE


def test_negative_delay_rejected() -> None:
    with pytest.raises(ValueError):
        schedule_debounced(lambda: None, -0.1)


@pytest.mark.asyncio
async def test_defaults_to_running_event_loop() -> None:
    done = asyncio.Event()
    calls: list[int] = []

    def action() -> None:
        calls.append(1)
        done.set()

    debounced = schedule_debounced(action, 0.01)
    debounced()
    debounced()
    await asyncio.wait_for(done.wait(), timeout=1.0)
    await asyncio.sleep(0.03)

    assert calls == [1]
