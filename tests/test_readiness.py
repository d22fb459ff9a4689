import pytest

from domain.errors import CommsError, DeviceReportedError, ReadinessTimeoutError
from pipeline.readiness import (
    read_status,
    wait_not_busy,
    wait_sealing_complete,
    wait_temperature_ready,
    wait_until,
)


def test_ready_predicate_returns_without_sleeping(clock):
    wait_until(lambda: (True, None), poll_interval_s=1.0, timeout_s=5.0,
               sleep_fn=clock.sleep, clock_fn=clock.monotonic)
    assert clock.sleeps == []


def test_timeout_only_after_budget_elapses(clock):
    calls = []

    def never():
        calls.append(clock.now)
        return False, "Busy"

    with pytest.raises(ReadinessTimeoutError) as exc:
        wait_until(never, poll_interval_s=1.0, timeout_s=5.0, what="device",
                   sleep_fn=clock.sleep, clock_fn=clock.monotonic)

    assert clock.now > 5.0
    assert len(calls) == 7
    assert exc.value.last_reason == "Busy"
    assert "Timeout waiting for device" in str(exc.value)
    assert "Last status: Busy" in str(exc.value)
    assert isinstance(exc.value, TimeoutError)


def test_predicate_errors_propagate(clock):
    def broken():
        raise CommsError("port gone")

    with pytest.raises(CommsError):
        wait_until(broken, poll_interval_s=1.0, timeout_s=5.0,
                   sleep_fn=clock.sleep, clock_fn=clock.monotonic)


def test_read_status_decodes_reply(make_channel, transport):
    transport.script("?", "0C")
    status = read_status(make_channel(transport))
    assert status.busy and status.not_at_seal_temperature


def test_not_busy_logs_reason_only_when_it_changes(make_channel, transport, logs):
    transport.script("?", "04", "04", "14", "00")
    wait_not_busy(make_channel(transport))

    reasons = [line for line in logs if line.startswith("Device status:")]
    assert reasons == ["Device status: Busy", "Device status: Busy, Plate Not Present"]
    assert transport.commands == ["?"] * 4


def test_not_busy_treats_garbled_reply_as_not_ready(make_channel, transport):
    transport.script("?", "zz", "", "00")
    wait_not_busy(make_channel(transport))
    assert transport.commands == ["?"] * 3


def test_temperature_wait_is_quiet_by_default(make_channel, transport, logs):
    transport.script("?", "08", "08", "00")
    wait_temperature_ready(make_channel(transport))

    assert not any(line.startswith("Device status:") for line in logs)
    assert transport.commands == ["?"] * 3


def test_temperature_wait_ignores_busy(make_channel, transport):
    transport.script("?", "04")
    wait_temperature_ready(make_channel(transport))
    assert transport.commands == ["?"]


def test_sealing_complete_polls_at_half_second(make_channel, transport, clock):
    transport.script("?", "04", "04", "00")
    wait_sealing_complete(make_channel(transport, reply_mode="buffered"))
    assert clock.sleeps.count(0.5) == 2


def test_sealing_complete_error_bit_fails(make_channel, transport):
    transport.script("?", "04", "02")

    with pytest.raises(DeviceReportedError) as exc:
        wait_sealing_complete(make_channel(transport))

    assert exc.value.flags == ["Error"]
    assert "Sealing failed. Issues: Error" in str(exc.value)


def test_sealing_complete_times_out_after_thirty_seconds(make_channel, transport, clock):
    transport.status = "04"
    with pytest.raises(ReadinessTimeoutError):
        wait_sealing_complete(make_channel(transport))
    assert clock.now > 30.0


def test_temperature_wait_times_out_after_budget(make_channel, transport, clock):
    transport.status = "08"
    with pytest.raises(ReadinessTimeoutError) as exc:
        wait_temperature_ready(make_channel(transport))

    assert clock.now > 300.0
    assert exc.value.last_reason == "Not At Seal Temperature"
    assert "Timeout waiting for temperature to reach target" in str(exc.value)
