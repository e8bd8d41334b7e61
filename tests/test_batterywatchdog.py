import argparse
import time

import pytest

from pybatterywatchdog.batterywatchdog import BatteryWatchdog, BatterySample, NotificationState, \
    CHARGING, DISCHARGING, FULL, EMPTY, UNKNOWN
from pybatterywatchdog.errors import EnumerationError, DeviceQueryError, LaunchError


class _StopLoop(Exception):
    pass


class _FakeEnumerator:
    """Replays one list of samples per poll."""

    def __init__(self, polls):
        self.polls = list(polls)
        self.calls = 0

    def samples(self):
        poll = self.polls[self.calls]
        self.calls += 1
        for sample in poll:
            if isinstance(sample, Exception):
                raise sample
            yield sample


class _FakeRunner:
    command_line = "notify-send low"

    def __init__(self, error=None):
        self.runs = 0
        self.error = error

    def run(self):
        if self.error is not None:
            raise self.error
        self.runs += 1
        return 1


class _CountingSleep:
    def __init__(self, limit, real=False):
        self.limit = limit
        self.real = real
        self.durations = []

    def __call__(self, seconds):
        self.durations.append(seconds)
        if self.real:
            time.sleep(seconds)
        if len(self.durations) >= self.limit:
            raise _StopLoop()


def _config(percentage=20, polling_period=30):
    return argparse.Namespace(percentage=percentage, polling_period=polling_period)


def _bat(state, percentage, device_id="BAT0"):
    return BatterySample(device_id, state, percentage)


def _fires_per_poll(polls, percentage=20):
    runner = _FakeRunner()
    watchdog = BatteryWatchdog(_FakeEnumerator(polls), runner, _config(percentage))
    fired = []
    for _ in polls:
        before = runner.runs
        watchdog.poll_once()
        fired.append(runner.runs - before)
    return fired


def test_never_fires_at_or_above_threshold():
    polls = [[_bat(DISCHARGING, p)] for p in (90, 50, 21, 20.5, 20)]
    assert _fires_per_poll(polls) == [0, 0, 0, 0, 0]


def test_threshold_is_strict():
    assert _fires_per_poll([[_bat(DISCHARGING, 20.0)]]) == [0]
    assert _fires_per_poll([[_bat(DISCHARGING, 19.99)]]) == [1]


def test_fires_once_when_crossing_below_threshold():
    polls = [[_bat(DISCHARGING, 25)], [_bat(DISCHARGING, 18)], [_bat(DISCHARGING, 15)]]
    assert _fires_per_poll(polls) == [0, 1, 0]


def test_charging_rearms():
    polls = [[_bat(DISCHARGING, 15)], [_bat(CHARGING, 40)], [_bat(DISCHARGING, 10)]]
    assert _fires_per_poll(polls) == [1, 0, 1]


def test_non_discharging_states_are_ignored():
    polls = [[_bat(FULL, 100)], [_bat(DISCHARGING, 19)]]
    assert _fires_per_poll(polls) == [0, 1]


def test_full_empty_unknown_do_not_rearm():
    polls = [[_bat(DISCHARGING, 10)],
             [_bat(FULL, 10)],
             [_bat(EMPTY, 0)],
             [_bat(UNKNOWN, 5)],
             [_bat(DISCHARGING, 5)]]
    assert _fires_per_poll(polls) == [1, 0, 0, 0, 0]


def test_charging_below_threshold_does_not_fire():
    polls = [[_bat(CHARGING, 5)], [_bat(CHARGING, 6)]]
    assert _fires_per_poll(polls) == [0, 0]


def test_devices_have_independent_flags():
    polls = [[_bat(DISCHARGING, 10, "BAT0"), _bat(DISCHARGING, 50, "BAT1")],
             [_bat(DISCHARGING, 9, "BAT0"), _bat(DISCHARGING, 15, "BAT1")],
             [_bat(CHARGING, 12, "BAT0"), _bat(DISCHARGING, 14, "BAT1")],
             [_bat(DISCHARGING, 11, "BAT0"), _bat(DISCHARGING, 13, "BAT1")]]
    assert _fires_per_poll(polls) == [1, 1, 0, 1]


def test_negative_threshold_never_fires():
    assert _fires_per_poll([[_bat(DISCHARGING, 0)]], percentage=-1) == [0]


def test_process_sample_reports_execution():
    runner = _FakeRunner()
    state = NotificationState()
    watchdog = BatteryWatchdog(_FakeEnumerator([]), runner, _config(), notification_state=state)
    assert watchdog.process_sample(_bat(DISCHARGING, 3))
    assert state.is_notified("BAT0")
    assert not watchdog.process_sample(_bat(DISCHARGING, 2))
    assert not watchdog.process_sample(_bat(CHARGING, 2))
    assert not state.is_notified("BAT0")
    assert runner.runs == 1


def test_notified_regardless_of_exit_status():
    runner = _FakeRunner()
    watchdog = BatteryWatchdog(_FakeEnumerator([[_bat(DISCHARGING, 3)]] * 2), runner, _config())
    watchdog.poll_once()
    watchdog.poll_once()
    assert runner.runs == 1


def test_launch_error_propagates_and_leaves_flag_clear():
    runner = _FakeRunner(error=LaunchError("/bin/sh", "missing"))
    watchdog = BatteryWatchdog(_FakeEnumerator([[_bat(DISCHARGING, 3)]]), runner, _config())
    with pytest.raises(LaunchError):
        watchdog.poll_once()
    assert not watchdog.notification_state.is_notified("BAT0")


def test_enumeration_errors_propagate():
    enumerator = _FakeEnumerator([[EnumerationError("UPower", "no bus")]])
    watchdog = BatteryWatchdog(enumerator, _FakeRunner(), _config())
    with pytest.raises(EnumerationError):
        watchdog.poll_once()


def test_device_query_error_after_earlier_devices_processed():
    runner = _FakeRunner()
    enumerator = _FakeEnumerator([[_bat(DISCHARGING, 3), DeviceQueryError("BAT1", "gone")]])
    watchdog = BatteryWatchdog(enumerator, runner, _config())
    with pytest.raises(DeviceQueryError):
        watchdog.poll_once()
    assert runner.runs == 1


def test_poll_once_returns_samples():
    samples = [_bat(FULL, 100, "BAT0"), _bat(DISCHARGING, 80, "BAT1")]
    watchdog = BatteryWatchdog(_FakeEnumerator([samples]), _FakeRunner(), _config())
    assert watchdog.poll_once() == samples


def test_run_sleeps_polling_period_between_polls():
    sleep = _CountingSleep(limit=3)
    enumerator = _FakeEnumerator([[_bat(DISCHARGING, 50)]] * 3)
    watchdog = BatteryWatchdog(enumerator, _FakeRunner(), _config(polling_period=5), sleep=sleep)
    with pytest.raises(_StopLoop):
        watchdog.run()
    assert sleep.durations == [5.0, 5.0, 5.0]
    assert enumerator.calls == 3


def test_run_fires_through_the_loop():
    sleep = _CountingSleep(limit=3)
    runner = _FakeRunner()
    enumerator = _FakeEnumerator([[_bat(DISCHARGING, 25)], [_bat(DISCHARGING, 18)], [_bat(DISCHARGING, 15)]])
    watchdog = BatteryWatchdog(enumerator, runner, _config(), sleep=sleep)
    with pytest.raises(_StopLoop):
        watchdog.run()
    assert runner.runs == 1


def test_run_wall_clock_interval():
    sleep = _CountingSleep(limit=2, real=True)
    enumerator = _FakeEnumerator([[_bat(FULL, 100)]] * 2)
    watchdog = BatteryWatchdog(enumerator, _FakeRunner(), _config(polling_period=0.2), sleep=sleep)
    start = time.monotonic()
    with pytest.raises(_StopLoop):
        watchdog.run()
    elapsed = time.monotonic() - start
    assert 0.39 <= elapsed < 0.4 + 0.5


def test_verbose_logs_samples_and_command(caplog):
    caplog.set_level("INFO", logger="pybatterywatchdog")
    watchdog = BatteryWatchdog(_FakeEnumerator([[_bat(DISCHARGING, 12.5)]]), _FakeRunner(), _config())
    watchdog.poll_once()
    assert "BAT0" in caplog.text
    assert "charge: 12.5" in caplog.text
    assert "Executing command: notify-send low" in caplog.text
