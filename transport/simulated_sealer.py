from decimal import Decimal

import sealer_command_ids as CMD
from domain.device_status import (
    BUSY_BIT,
    ERROR_BIT,
    NO_FAIL_BIT,
    NOT_AT_SEAL_TEMPERATURE_BIT,
    NOT_INITIALISED_BIT,
    PARK_MODE_BIT,
    PLATE_NOT_PRESENT_BIT,
)
from domain.errors import CommsError
from protocol.command_registry import command_name


class SimulatedSealer:
    """
    In-memory stand-in for an ALPS sealer, implementing the transport interface.

    Replies are produced when a command is written and returned by the next
    read_available() call. The heater moves `heat_step_c` toward the set
    point on every status poll, and a seal stays busy for `seal_polls`
    status polls.

    Example
    -------
    >>> sim = SimulatedSealer(actual_temperature_c=165)
    >>> sim.open(); sim.write(b"?\\r"); sim.read_available()
    b'21'
    """

    def __init__(
        self,
        *,
        actual_temperature_c: int = 21,
        heat_step_c: int = 20,
        seal_polls: int = 3,
        plate_present: bool = True,
        version: str = "ALPS5000 SIM 1.0",
    ):
        self.port = "SIM"
        self.actual_temperature_c = actual_temperature_c
        self.heat_step_c = heat_step_c
        self.seal_polls = seal_polls
        self.plate_present = plate_present
        self.version = version

        self.set_temperature_c = 165
        self.seal_time_tenths = 30
        self.seal_force_kg = 50
        self.seal_length_mm = 125
        self.drive_on_mm = Decimal("0.000")
        self.force_sensor_enabled = True
        self.initialised = False
        self.park_mode = False
        self.error = False
        self.fail_next_seal = False
        self.shuttle_inside = False

        self._busy_polls = 0
        self._pending_fault = False
        self._is_open = False
        self._out = b""
        self.commands: list[str] = []

    # ---------- transport interface ----------
    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        self._is_open = True

    def close(self) -> None:
        self._is_open = False
        self._out = b""

    def write(self, data: bytes) -> None:
        if not self._is_open:
            raise CommsError("Simulated port is not open")
        for line in data.decode("ascii").split("\r"):
            if line:
                self.commands.append(line)
                try:
                    reply = self._handle(line)
                except (ValueError, ArithmeticError):
                    reply = CMD.RESPONSE_ERROR
                self._out += reply.encode("ascii")

    def read_available(self) -> bytes:
        if not self._is_open:
            raise CommsError("Simulated port is not open")
        out, self._out = self._out, b""
        return out

    # ---------- device model ----------
    @property
    def at_temperature(self) -> bool:
        return abs(self.actual_temperature_c - self.set_temperature_c) <= 2

    def status_byte(self) -> int:
        bits = []
        if self.error:
            bits.append(ERROR_BIT)
        else:
            bits.append(NO_FAIL_BIT)
        if self._busy_polls > 0:
            bits.append(BUSY_BIT)
        if not self.at_temperature:
            bits.append(NOT_AT_SEAL_TEMPERATURE_BIT)
        if not self.plate_present:
            bits.append(PLATE_NOT_PRESENT_BIT)
        if not self.initialised:
            bits.append(NOT_INITIALISED_BIT)
        if self.park_mode:
            bits.append(PARK_MODE_BIT)
        return sum(1 << b for b in bits)

    def _tick(self) -> None:
        delta = self.set_temperature_c - self.actual_temperature_c
        step = max(-self.heat_step_c, min(self.heat_step_c, delta))
        self.actual_temperature_c += step
        if self._busy_polls > 0:
            self._busy_polls -= 1
            if self._busy_polls == 0 and self._pending_fault:
                self.error = True
                self._pending_fault = False

    def _handle(self, command: str) -> str:
        name = command_name(command)

        if name == "STATUS":
            status = self.status_byte()
            self._tick()
            return f"{status:02X}"
        if name == "INITIALIZE":
            self.initialised = True
            self.error = False
            self.park_mode = False
            return CMD.RESPONSE_OK
        if name == "START_SEAL":
            if not self.at_temperature or not self.plate_present or self._busy_polls:
                return CMD.RESPONSE_ERROR
            self._busy_polls = self.seal_polls
            self._pending_fault = self.fail_next_seal
            self.fail_next_seal = False
            return CMD.RESPONSE_OK

        arg = self._argument(command, name)
        if name == "SET_TEMPERATURE":
            self.set_temperature_c = int(arg)
        elif name == "SET_SEAL_TIME":
            self.seal_time_tenths = int(arg)
        elif name == "SET_SEAL_FORCE":
            self.seal_force_kg = int(arg)
        elif name == "SET_SEAL_LENGTH":
            self.seal_length_mm = int(arg)
        elif name == "SET_DRIVE_ON":
            self.drive_on_mm = Decimal(arg)
        elif name == "GET_SET_TEMPERATURE":
            return str(self.set_temperature_c)
        elif name == "GET_ACTUAL_TEMPERATURE":
            return str(self.actual_temperature_c)
        elif name == "GET_SEAL_TIME":
            return f"{Decimal(self.seal_time_tenths) / 10:.1f}"
        elif name == "GET_SEAL_FORCE":
            return str(self.seal_force_kg)
        elif name == "GET_SEAL_LENGTH":
            return str(self.seal_length_mm)
        elif name == "GET_DRIVE_ON":
            return f"{self.drive_on_mm:.3f}"
        elif name in ("FORCE_SENSOR_ON", "FORCE_SENSOR_OFF"):
            self.force_sensor_enabled = name == "FORCE_SENSOR_ON"
        elif name == "SHUTTLE_IN":
            self.shuttle_inside = True
        elif name == "SHUTTLE_OUT":
            self.shuttle_inside = False
        elif name == "VERSION":
            return self.version
        else:
            return CMD.RESPONSE_ERROR
        return CMD.RESPONSE_OK

    @staticmethod
    def _argument(command: str, name: str) -> str:
        token = getattr(CMD, name, "") if name != "UNKNOWN" else ""
        return command[len(token):]
