import time
from decimal import Decimal

import sealer_command_ids as CMD
from domain.device_status import DeviceStatus
from domain.errors import DeviceReportedError, SealerError
from domain.sealing_parameters import SealingParameters, SealingRun, SessionState
from infra.config import SealerConfig
from pipeline.readiness import read_status
from pipeline.sealing_sequence import OperationSequencer
from protocol.command_composer import (
    encode_drive_on_distance,
    encode_force_sensor,
    encode_seal_force,
    encode_seal_length,
    encode_seal_time,
    encode_temperature,
)
from protocol.reply_parser import (
    is_error_reply,
    parse_drive_on_reply,
    parse_seal_force_reply,
    parse_seal_length_reply,
    parse_seal_time_reply,
    parse_temperature_reply,
)
from transport.command_channel import CommandChannel
from transport.serial_interface import SerialTransport


class AlpsSealerDriver:
    """
    ALPS 5000 plate sealer driver.

    - Host lifecycle: open_connection / initialize_device /
      execute_operation(name, parameters) / abort_device.
    - Connection parameters and the operation registry are plain dicts the
      host may edit between calls.
    - Single caller at a time; abort_device() may be called from another
      thread to make a running operation fail on its next command.
    """

    PORT = "Port"
    OPERATION_CONNECT = "Connect"
    OPERATION_START_SEALING = "StartSealing"

    def __init__(
        self,
        transport=None,
        *,
        log_fn,
        config: SealerConfig | None = None,
        sleep_fn=time.sleep,
        clock_fn=time.monotonic,
    ):
        self.config = config or SealerConfig()
        self.log_fn = log_fn
        self.transport = transport if transport is not None else SerialTransport(self.config.connection)
        self.channel = CommandChannel(
            self.transport,
            log_fn=log_fn,
            timing=self.config.timing,
            reply_timeout_s=self.config.connection.timeout,
            sleep_fn=sleep_fn,
            clock_fn=clock_fn,
        )
        self.sequencer = OperationSequencer(self.channel, log_fn=log_fn, timing=self.config.timing)

        self.connection_parameters = {self.PORT: self.config.connection.port}
        self.operations = {
            self.OPERATION_CONNECT: {},
            self.OPERATION_START_SEALING: self.config.sealing.to_parameters().as_operation_parameters(),
        }

    # ---------- state ----------
    @property
    def state(self) -> SessionState:
        return self.sequencer.state

    @property
    def last_run(self) -> SealingRun | None:
        return self.sequencer.last_run

    @property
    def sealing_parameters(self) -> SealingParameters:
        return SealingParameters.from_operation_parameters(self.operations[self.OPERATION_START_SEALING])

    def set_sealing_parameters(self, **overrides) -> SealingParameters:
        params = SealingParameters.from_operation_parameters(overrides, base=self.sealing_parameters)
        self.operations[self.OPERATION_START_SEALING] = params.as_operation_parameters()
        return params

    # ---------- host lifecycle ----------
    def open_connection(self) -> DeviceStatus:
        port = self.connection_parameters.get(self.PORT)
        if port is None or not str(port).strip():
            raise ValueError(f"Connection Parameter cannot be null or empty: {self.PORT}")
        if hasattr(self.transport, "port"):
            self.transport.port = str(port)
        self.log_fn(f"[{self.config.device_id}] Using port: {getattr(self.transport, 'port', port)}")
        return self.sequencer.open_connection()

    def initialize_device(self) -> None:
        self.sequencer.initialize(self.sealing_parameters)

    def execute_operation(self, name: str, parameters: dict | None = None):
        if name not in self.operations:
            raise ValueError(f"Error: Unrecognized Command: {name}")
        if parameters:
            merged = dict(self.operations[name])
            merged.update(parameters)
            if name == self.OPERATION_START_SEALING:
                merged = SealingParameters.from_operation_parameters(merged).as_operation_parameters()
            self.operations[name] = merged

        if name == self.OPERATION_CONNECT:
            return self._execute_connect()
        return self.sequencer.start_sealing(self.sealing_parameters)

    def abort_device(self) -> None:
        self.sequencer.disconnect()

    # ---------- conveniences ----------
    def connect(self) -> DeviceStatus:
        try:
            self.open_connection()
            self.initialize_device()
            return self.execute_operation(self.OPERATION_CONNECT)
        except SealerError as e:
            self.log_fn(f"Connection sequence failed: {e}")
            raise

    def start_sealing(self, **overrides) -> SealingRun:
        if overrides:
            self.set_sealing_parameters(**overrides)
        return self.execute_operation(self.OPERATION_START_SEALING)

    def disconnect(self) -> None:
        self.abort_device()

    def _execute_connect(self) -> DeviceStatus:
        status = self.get_status()
        for flag in status.describe_active(exclude_no_fail=False):
            self.log_fn(f"- {flag}")
        return status

    # ---------- device queries ----------
    def _command(self, command: str, description: str) -> str:
        reply = self.channel.send(command, description)
        if is_error_reply(reply):
            raise DeviceReportedError(f"{description} rejected by device")
        return reply

    def get_status(self) -> DeviceStatus:
        return read_status(self.channel)

    def get_set_temperature(self) -> int:
        return parse_temperature_reply(self._command(CMD.GET_SET_TEMPERATURE, "Reading temperature setpoint"))

    def get_actual_temperature(self) -> int:
        return parse_temperature_reply(self._command(CMD.GET_ACTUAL_TEMPERATURE, "Reading actual sealing temperature"))

    def set_temperature(self, celsius: int) -> None:
        self._command(encode_temperature(celsius), f"Setting sealing temperature to {celsius}°C")

    def get_seal_time(self) -> Decimal:
        return parse_seal_time_reply(self._command(CMD.GET_SEAL_TIME, "Reading sealing time"))

    def set_seal_time(self, seconds) -> None:
        self._command(encode_seal_time(seconds), f"Setting sealing time to {seconds} seconds")

    def get_seal_force(self) -> int:
        return parse_seal_force_reply(self._command(CMD.GET_SEAL_FORCE, "Reading sealing force"))

    def set_seal_force(self, kg: int) -> None:
        self._command(encode_seal_force(kg), f"Setting sealing force to {kg} Kg")

    def get_seal_length(self) -> int:
        return parse_seal_length_reply(self._command(CMD.GET_SEAL_LENGTH, "Reading seal length"))

    def set_seal_length(self, mm: int) -> None:
        self._command(encode_seal_length(mm), f"Setting seal length to {mm} mm")

    def get_drive_on_distance(self) -> Decimal:
        return parse_drive_on_reply(self._command(CMD.GET_DRIVE_ON, "Reading drive-on distance"))

    def set_drive_on_distance(self, mm) -> None:
        self._command(encode_drive_on_distance(mm), f"Setting drive-on distance to {mm} mm")

    def enable_force_sensor(self) -> None:
        self._command(encode_force_sensor(True), "Enabling force sensor")

    def disable_force_sensor(self) -> None:
        self._command(encode_force_sensor(False), "Disabling force sensor")

    def shuttle_in(self) -> None:
        self._command(CMD.SHUTTLE_IN, "Moving shuttle inside")

    def shuttle_out(self) -> None:
        self._command(CMD.SHUTTLE_OUT, "Moving shuttle to load position")

    def get_version(self) -> str:
        return self._command(CMD.VERSION, "Reading software version")
