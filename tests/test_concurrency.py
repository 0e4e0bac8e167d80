"""Bounded parallel execution."""

from __future__ import annotations

import threading
import time

from notification_engine.utils import bounded_map


def test_results_keep_input_order():
    def slow_square(value):
        time.sleep(0.01 * (5 - value))
        return value * value

    results = bounded_map(slow_square, range(5), max_workers=3)

    assert [result.item for result in results] == [0, 1, 2, 3, 4]
    assert [result.value for result in results] == [0, 1, 4, 9, 16]


def test_one_failure_does_not_abort_the_batch():
    def explode_on_two(value):
        if value == 2:
            raise ValueError("boom")
        return value

    results = bounded_map(explode_on_two, [1, 2, 3], max_workers=2)

    assert [result.ok for result in results] == [True, False, True]
    assert isinstance(results[1].error, ValueError)


def test_slow_items_are_reported_as_timed_out():
    release = threading.Event()

    def maybe_hang(value):
        if value == "hang":
            release.wait(5)
        return value

    try:
        results = bounded_map(maybe_hang, ["fast", "hang"], max_workers=2, timeout=0.2)
    finally:
        release.set()

    assert results[0].ok
    assert results[1].timed_out
    assert not results[1].ok


def test_single_worker_runs_inline():
    caller = threading.get_ident()
    seen = []

    results = bounded_map(lambda value: seen.append(threading.get_ident()) or value, [1, 2], max_workers=1)

    assert seen == [caller, caller]
    assert [result.value for result in results] == [1, 2]


def test_empty_input_returns_empty_list():
    assert bounded_map(lambda value: value, [], max_workers=4) == []


def test_timeout_applies_to_a_single_item():
    release = threading.Event()

    started = time.monotonic()
    try:
        (result,) = bounded_map(lambda value: release.wait(5), ["only"], max_workers=4, timeout=0.05)
    finally:
        release.set()

    assert result.timed_out
    assert time.monotonic() - started < 1.0
