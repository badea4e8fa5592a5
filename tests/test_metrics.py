import time
from unittest import mock

import pytest

from mysticeti.metrics import Counter, CounterVec, UtilizationTimer


def test_counter_starts_at_zero_and_increments():
    counter = Counter("core_lock_enqueued", "Number of enqueued core requests")
    assert counter.value == 0
    counter.inc()
    counter.inc(5)
    assert counter.value == 6


def test_counter_rejects_negative_amount():
    counter = Counter()
    with pytest.raises(ValueError):
        counter.inc(-1)
    assert counter.value == 0


def test_utilization_timer_records_elapsed_microseconds():
    counter = Counter()
    with mock.patch("time.monotonic_ns", side_effect=[1_000_000, 3_500_000]):
        with counter.utilization_timer():
            pass
    assert counter.value == 2500


def test_utilization_timer_measures_real_sleep():
    counter = Counter()
    with counter.utilization_timer():
        time.sleep(0.01)
    assert counter.value >= 10_000


def test_utilization_timer_records_only_once():
    counter = Counter()
    timer = UtilizationTimer(counter)
    with timer:
        time.sleep(0.002)
    first = counter.value
    with timer:
        time.sleep(0.002)
    assert counter.value == first


def test_utilization_timer_records_on_exception():
    counter = Counter()
    with pytest.raises(RuntimeError):
        with counter.utilization_timer():
            time.sleep(0.002)
            raise RuntimeError("boom")
    assert counter.value >= 2000


def test_counter_vec_returns_same_counter_for_same_labels():
    vec = CounterVec("utilization_timer", "Utilization timer", ["proc"])
    first = vec.with_label_values("Core::add_blocks")
    again = vec.with_label_values("Core::add_blocks")
    other = vec.with_label_values("Core::try_new_block")
    assert first is again
    assert first is not other
    first.inc(3)
    assert dict(vec) == {("Core::add_blocks",): 3, ("Core::try_new_block",): 0}


def test_counter_vec_checks_label_count():
    vec = CounterVec(
        "block_sync_requests_received",
        "Number of block sync requests received",
        ["authority", "fulfilled"],
    )
    with pytest.raises(ValueError):
        vec.with_label_values("A")
    with pytest.raises(ValueError):
        vec.with_label_values("A", "true", "extra")
    assert len(vec) == 0


def test_counter_vec_needs_labels():
    with pytest.raises(ValueError):
        CounterVec("name", "help", [])


def test_counter_vec_utilization_timer_uses_labelled_counter():
    vec = CounterVec("utilization_timer", "Utilization timer", ["proc"])
    with vec.utilization_timer("Core::run_block_handler"):
        time.sleep(0.003)
    assert vec.with_label_values("Core::run_block_handler").value >= 3000
    assert len(vec) == 1