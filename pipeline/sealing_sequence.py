import sealer_command_ids as CMD
from domain.device_status import DeviceStatus
from domain.errors import DeviceReportedError, ProtocolError, SealerError
from domain.sealing_parameters import SealingParameters, SealingRun, SealingRunState, SessionState
from infra.config import TimingConfig
from pipeline.readiness import (
    read_status,
    wait_not_busy,
    wait_sealing_complete,
    wait_temperature_ready,
)
from protocol.command_composer import EncodedCommandSet, validate_and_encode
from protocol.reply_parser import is_error_reply, parse_ack


class OperationSequencer:
    """
    Session state machine for one sealer: connect, initialize, seal, disconnect.

    Every operation blocks until done. Failures are logged and re-raised as
    the typed SealerError that caused them.
    """

    def __init__(self, channel, *, log_fn, timing: TimingConfig | None = None):
        self.channel = channel
        self.log_fn = log_fn
        self.timing = timing or channel.timing or TimingConfig()
        self.state = SessionState.NOT_CONNECTED
        self.last_run: SealingRun | None = None

    @property
    def is_initialized(self) -> bool:
        return self.state is SessionState.INITIALIZED

    def open_connection(self) -> DeviceStatus:
        """Open the port and confirm the link with one status poll."""
        try:
            self.channel.open()
            status = read_status(self.channel, "Testing initial connection")
        except SealerError as e:
            self.log_fn(f"Failed to establish connection: {e}")
            raise

        if self.state is SessionState.NOT_CONNECTED:
            self.state = SessionState.CONNECTED
        self.log_fn(f"Connection established. Status: {status}")
        return status

    def connect(self, parameters: SealingParameters) -> DeviceStatus:
        self.log_fn("Starting connection sequence...")
        status = self.open_connection()
        self.initialize(parameters)
        return status

    def initialize(self, parameters: SealingParameters) -> None:
        if self.is_initialized:
            self.log_fn("Device already initialized, skipping initialization")
            return

        self.log_fn("Starting device initialization...")
        try:
            encoded = validate_and_encode(parameters)
            reply = self.channel.send(CMD.INITIALIZE, "Initializing device")
            if is_error_reply(reply):
                raise DeviceReportedError(f"Device initialization failed: {reply}")
            self.send_encoded(encoded)
        except SealerError as e:
            self.state = SessionState.CONNECTED if self.channel.is_open else SessionState.NOT_CONNECTED
            self.log_fn(f"Initialization failed: {e}")
            raise

        self.state = SessionState.INITIALIZED
        self.log_fn(f"Device initialized successfully. Response: {reply}")

    def send_encoded(self, encoded: EncodedCommandSet, *, wait_ready: bool = True) -> None:
        """
        Send validated parameter commands in order. Stops at the first
        command that fails.
        """
        for command, description in encoded.commands():
            self.channel.send(command, description, wait_ready=wait_ready)

    def start_sealing(self, parameters: SealingParameters) -> SealingRun:
        run = SealingRun(parameters=parameters)
        self.last_run = run
        self.log_fn("Starting sealing operation...")
        t = self.timing

        try:
            encoded = validate_and_encode(parameters)
            run.advance(SealingRunState.CHECKING_READY)
            wait_not_busy(
                self.channel,
                timeout_s=t.ready_timeout_s,
                poll_interval_s=t.ready_poll_s,
                log_reason_changes=t.log_busy_reasons,
            )

            # Readiness was just established; per-command gating would slip
            # extra status polls between the parameter writes.
            run.advance(SealingRunState.SETTING_PARAMETERS)
            self.send_encoded(encoded, wait_ready=False)

            run.advance(SealingRunState.WAITING_TEMPERATURE)
            wait_temperature_ready(
                self.channel,
                timeout_s=t.temperature_timeout_s,
                poll_interval_s=t.temperature_poll_s,
                log_reason_changes=t.log_temperature_reasons,
            )

            run.advance(SealingRunState.SEALING)
            reply = self.channel.send(CMD.START_SEAL, "Starting sealing operation", wait_ready=False)
            ok, normalized = parse_ack(reply)
            if not ok:
                if is_error_reply(normalized):
                    raise DeviceReportedError("Device rejected sealing command. Check temperature and device status.")
                raise ProtocolError(f"Unexpected response: {reply}")

            self.log_fn("Sealing operation started, waiting for completion...")
            run.advance(SealingRunState.WAITING_COMPLETE)
            wait_sealing_complete(
                self.channel,
                timeout_s=t.complete_timeout_s,
                poll_interval_s=t.complete_poll_s,
            )
        except SealerError as e:
            run.fail(e)
            self.log_fn(f"Sealing operation failed: {e}")
            raise

        run.advance(SealingRunState.DONE)
        self.log_fn("Sealing operation completed successfully")
        return run

    def disconnect(self) -> None:
        """Best effort: never raises."""
        try:
            self.channel.release()
        except Exception as e:
            self.log_fn(f"Error while closing port: {e}")
        self.state = SessionState.NOT_CONNECTED
        self.log_fn("Device connection aborted")
