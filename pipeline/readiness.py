import time

import sealer_command_ids as CMD
from domain.device_status import DeviceStatus
from domain.errors import DeviceReportedError, NoResponseError, ProtocolError, ReadinessTimeoutError
from protocol.reply_parser import decode_status


DEFAULT_POLL_INTERVAL_S = 1.0
DEFAULT_TIMEOUT_S = 300.0
COMPLETE_POLL_INTERVAL_S = 0.5
COMPLETE_TIMEOUT_S = 30.0


def wait_until(
    predicate,
    *,
    poll_interval_s: float,
    timeout_s: float,
    what: str = "condition",
    sleep_fn=time.sleep,
    clock_fn=time.monotonic,
    log_fn=None,
    log_reason_changes: bool = False,
) -> None:
    """
    Poll `predicate` until it reports ready or `timeout_s` elapses.

    `predicate()` returns (ready, reason). It is called immediately; if it is
    not ready the loop sleeps `poll_interval_s` and tries again. Exceptions
    raised by the predicate end the wait and propagate unchanged.

    With `log_reason_changes`, a reason is logged only when it differs from
    the last one logged.
    """
    t_start = clock_fn()
    last_reason = None
    logged_reason = None

    while True:
        ready, reason = predicate()
        if ready:
            return

        last_reason = reason
        if log_reason_changes and log_fn is not None and reason != logged_reason:
            log_fn(f"Device status: {reason}")
            logged_reason = reason

        if clock_fn() - t_start > timeout_s:
            raise ReadinessTimeoutError(f"Timeout waiting for {what}", last_reason=last_reason)

        sleep_fn(poll_interval_s)


def read_status(channel, description: str = "Getting device status") -> DeviceStatus:
    reply = channel.send(CMD.STATUS, description, wait_ready=False)
    return decode_status(reply)


def _poll(channel, description: str):
    """Status poll where a missing or garbled reply just means 'not yet'."""
    try:
        return read_status(channel, description), None
    except (NoResponseError, ProtocolError) as e:
        return None, str(e)


def wait_not_busy(
    channel,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    log_reason_changes: bool = True,
) -> None:
    def not_busy():
        status, failure = _poll(channel, "Checking device status")
        if status is None:
            return False, failure
        if status.busy:
            return False, ", ".join(status.describe_active()) or "Device busy"
        return True, None

    wait_until(
        not_busy,
        poll_interval_s=poll_interval_s,
        timeout_s=timeout_s,
        what="device to become ready",
        sleep_fn=channel.sleep_fn,
        clock_fn=channel.clock_fn,
        log_fn=channel.log_fn,
        log_reason_changes=log_reason_changes,
    )


def wait_temperature_ready(
    channel,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    log_reason_changes: bool = False,
) -> None:
    def at_temperature():
        status, failure = _poll(channel, "Checking seal temperature")
        if status is None:
            return False, failure
        if status.not_at_seal_temperature:
            return False, "Not At Seal Temperature"
        return True, None

    wait_until(
        at_temperature,
        poll_interval_s=poll_interval_s,
        timeout_s=timeout_s,
        what="temperature to reach target",
        sleep_fn=channel.sleep_fn,
        clock_fn=channel.clock_fn,
        log_fn=channel.log_fn,
        log_reason_changes=log_reason_changes,
    )


def wait_sealing_complete(
    channel,
    *,
    timeout_s: float = COMPLETE_TIMEOUT_S,
    poll_interval_s: float = COMPLETE_POLL_INTERVAL_S,
) -> None:
    def complete():
        status, failure = _poll(channel, "Checking sealing status")
        if status is None:
            return False, failure
        if status.busy:
            return False, ", ".join(status.describe_active()) or "Device busy"
        if status.error:
            issues = status.describe_active()
            raise DeviceReportedError(f"Sealing failed. Issues: {', '.join(issues)}", flags=issues)
        return True, None

    wait_until(
        complete,
        poll_interval_s=poll_interval_s,
        timeout_s=timeout_s,
        what="sealing operation to complete",
        sleep_fn=channel.sleep_fn,
        clock_fn=channel.clock_fn,
        log_fn=channel.log_fn,
    )
