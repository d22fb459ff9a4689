import time

from domain.errors import CommsError, NoResponseError
from infra.config import TimingConfig
from pipeline.readiness import wait_not_busy
from protocol.command_registry import command_name, is_status_poll, is_supported_command
from protocol.frame_codec import compose_frame, decode_reply


class CommandChannel:
    """
    One command, one reply.

    - Opens the transport on demand, unless it was released by an abort.
    - Waits for the device to be not busy before any command except '?'.
    - Reads the reply after a fixed settle delay; replies have no terminator.
    """

    def __init__(
        self,
        transport,
        *,
        log_fn,
        timing: TimingConfig | None = None,
        reply_timeout_s: float = 5.0,
        sleep_fn=time.sleep,
        clock_fn=time.monotonic,
    ):
        self.transport = transport
        self.log_fn = log_fn
        self.timing = timing or TimingConfig()
        self.reply_timeout_s = reply_timeout_s
        self.sleep_fn = sleep_fn
        self.clock_fn = clock_fn
        self._released = False

    @property
    def is_open(self) -> bool:
        return self.transport.is_open and not self._released

    def open(self) -> None:
        self._released = False
        self._ensure_open()

    def release(self) -> None:
        """Close the transport and refuse to reopen until open() is called."""
        self._released = True
        if self.transport.is_open:
            self.log_fn("Closing port")
            self.transport.close()

    def _ensure_open(self) -> None:
        if self._released:
            raise CommsError("Port was closed by abort; reconnect first")
        if self.transport.is_open:
            return
        port = getattr(self.transport, "port", None)
        self.log_fn(f"Opening port {port}")
        try:
            self.transport.open()
        except CommsError:
            raise
        except OSError as e:
            raise CommsError(f"Failed to open port {port}: {e}") from e

    def _read_reply(self) -> bytes:
        buf = self.transport.read_available()
        if self.timing.reply_mode == "buffered":
            return buf

        deadline = self.clock_fn() + self.reply_timeout_s
        while self.clock_fn() < deadline:
            self.sleep_fn(self.timing.idle_gap_s)
            chunk = self.transport.read_available()
            if not chunk:
                break
            buf += chunk
        return buf

    def send(self, command: str, description: str | None = None, *, wait_ready: bool = True) -> str:
        if not is_supported_command(command):
            raise ValueError(f"Unsupported command: {command!r}")
        description = description or command_name(command)
        self._ensure_open()

        if wait_ready and not is_status_poll(command):
            wait_not_busy(
                self,
                timeout_s=self.timing.ready_timeout_s,
                poll_interval_s=self.timing.ready_poll_s,
                log_reason_changes=self.timing.log_busy_reasons,
            )

        framed = compose_frame(command)
        self.log_fn(f"{description} - TX -> {framed!r}")
        try:
            self.transport.write(framed)
            self.sleep_fn(self.timing.settle_s)
            raw = self._read_reply()
        except CommsError:
            raise
        except OSError as e:
            raise CommsError(f"{description} failed: {e}") from e

        reply = decode_reply(raw)
        self.log_fn(f"{description} - RX <- {reply!r}")
        if not reply:
            raise NoResponseError(f"No response received from the device ({description})")
        return reply
