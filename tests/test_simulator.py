import random
from datetime import timedelta

import pytest

from mysticeti.simulator import Simulator, current_rng, current_time, schedule_event


class Accumulator:
    def __init__(self):
        self.value = 0

    def handle_event(self, event):
        self.value += event


def values(simulator):
    return [state.value for state in simulator.states]


def test_simulator():
    simulator = Simulator([Accumulator(), Accumulator()], random.Random(0))
    simulator.schedule_event(timedelta(seconds=3), 0, 2)
    simulator.schedule_event(timedelta(seconds=1), 1, 4)
    simulator.schedule_event(timedelta(seconds=4), 0, 8)

    assert not simulator.run_one()
    assert simulator.time == timedelta(seconds=1)
    assert values(simulator) == [0, 4]
    simulator.schedule_event(timedelta(seconds=1), 1, 1)

    assert not simulator.run_one()
    assert simulator.time == timedelta(seconds=2)
    assert values(simulator) == [0, 5]

    assert not simulator.run_one()
    assert simulator.time == timedelta(seconds=3)
    assert values(simulator) == [2, 5]

    assert simulator.run_one()
    assert simulator.time == timedelta(seconds=4)
    assert values(simulator) == [10, 5]


def test_run_one_without_events_reports_complete():
    simulator = Simulator([Accumulator()])
    assert simulator.run_one()
    assert simulator.time == timedelta(0)


def test_same_time_events_run_in_schedule_order():
    class Recorder:
        def __init__(self):
            self.seen = []

        def handle_event(self, event):
            self.seen.append(event)

    simulator = Simulator([Recorder()])
    for label in ["x", "y", "z"]:
        simulator.schedule_event(timedelta(seconds=1), 0, label)
    while not simulator.run_one():
        pass
    assert simulator.states[0].seen == ["x", "y", "z"]


class Chain:
    def __init__(self):
        self.times = []

    def handle_event(self, event):
        self.times.append(current_time())
        if event > 0:
            schedule_event(timedelta(seconds=2), 0, event - 1)


def test_handler_schedules_follow_up_events():
    simulator = Simulator([Chain()])
    simulator.schedule_event(timedelta(seconds=1), 0, 2)
    while not simulator.run_one():
        pass
    times = simulator.states[0].times
    assert times[0] == timedelta(seconds=1)
    assert [b - a for a, b in zip(times, times[1:])] == [timedelta(seconds=2)] * 2
    assert simulator.time == times[-1]


def test_handler_rng_is_seeded_and_persisted():
    class Draw:
        def __init__(self):
            self.draws = []

        def handle_event(self, event):
            self.draws.append(current_rng().random())

    def draws(seed):
        simulator = Simulator([Draw()], random.Random(seed))
        for _ in range(3):
            simulator.schedule_event(timedelta(seconds=1), 0, None)
        while not simulator.run_one():
            pass
        return simulator.states[0].draws

    first = draws(7)
    assert first == draws(7)
    assert len(set(first)) == 3


def test_functions_outside_handler_raise():
    with pytest.raises(RuntimeError):
        current_time()
    with pytest.raises(RuntimeError):
        current_rng()
    with pytest.raises(RuntimeError):
        schedule_event(timedelta(seconds=1), 0, None)


def test_handler_error_leaves_simulator_usable():
    class Failing:
        def __init__(self):
            self.value = 0

        def handle_event(self, event):
            if event is None:
                raise ValueError("bad event")
            self.value += event

    simulator = Simulator([Failing()])
    simulator.schedule_event(timedelta(seconds=1), 0, None)
    simulator.schedule_event(timedelta(seconds=2), 0, 5)
    with pytest.raises(ValueError):
        simulator.run_one()
    assert simulator.run_one()
    assert simulator.states[0].value == 5


def test_schedule_for_unknown_state_raises():
    simulator = Simulator([Accumulator()])
    with pytest.raises(IndexError):
        simulator.schedule_event(timedelta(seconds=1), 3, 1)


def test_negative_delay_rejected():
    simulator = Simulator([Accumulator()])
    with pytest.raises(ValueError):
        simulator.schedule_event(timedelta(seconds=-1), 0, 1)


def test_close_drops_states():
    with Simulator([Accumulator(), Accumulator()]) as simulator:
        simulator.schedule_event(timedelta(seconds=1), 0, 1)
    assert simulator.states == []