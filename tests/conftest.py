from collections import deque

import pytest

from infra.config import SealerConfig, TimingConfig
from transport.command_channel import CommandChannel


class FakeClock:
    """monotonic()/sleep() pair where sleeping just advances time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedTransport:
    """
    Records every command and answers from per-command reply queues.

    '?' falls back to `status`, everything else to `default_reply`.
    A `responder(command)` returning a string takes precedence over both.
    """

    def __init__(self, *, status: str = "00", default_reply: str = "ok", responder=None):
        self.port = "TEST"
        self.status = status
        self.default_reply = default_reply
        self.responder = responder
        self.replies: dict[str, deque] = {}
        self.commands: list[str] = []
        self.raw_writes: list[bytes] = []
        self.open_calls = 0
        self.fail_open: Exception | None = None
        self.fail_write: Exception | None = None
        self.fail_close: Exception | None = None
        self._is_open = False
        self._out = b""

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        self.open_calls += 1
        if self.fail_open is not None:
            raise self.fail_open
        self._is_open = True

    def close(self) -> None:
        if self.fail_close is not None:
            raise self.fail_close
        self._is_open = False

    def script(self, command: str, *replies: str) -> None:
        self.replies.setdefault(command, deque()).extend(replies)

    def write(self, data: bytes) -> None:
        if self.fail_write is not None:
            raise self.fail_write
        self.raw_writes.append(data)
        command = data.decode("ascii").rstrip("\r")
        self.commands.append(command)
        self._out += self._reply(command).encode("ascii")

    def _reply(self, command: str) -> str:
        if self.responder is not None:
            reply = self.responder(command)
            if reply is not None:
                return reply
        queue = self.replies.get(command)
        if queue:
            return queue.popleft()
        return self.status if command == "?" else self.default_reply

    def read_available(self) -> bytes:
        out, self._out = self._out, b""
        return out


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def logs():
    return []


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def make_channel(clock, logs):
    def _make(transport, **timing):
        return CommandChannel(
            transport,
            log_fn=logs.append,
            timing=TimingConfig(**timing),
            sleep_fn=clock.sleep,
            clock_fn=clock.monotonic,
        )

    return _make


@pytest.fixture
def sealer_config():
    return SealerConfig()
