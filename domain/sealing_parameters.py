from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum


DEFAULT_TEMPERATURE = 165  # °C
DEFAULT_SEAL_TIME = Decimal("3.0")  # s
DEFAULT_SEAL_FORCE = 50  # Kg
DEFAULT_SEAL_LENGTH = 125  # mm

MIN_TEMPERATURE, MAX_TEMPERATURE = 0, 999
MIN_SEAL_TIME, MAX_SEAL_TIME = Decimal("0.0"), Decimal("9.9")
MIN_SEAL_FORCE, MAX_SEAL_FORCE = 5, 50
MIN_SEAL_LENGTH, MAX_SEAL_LENGTH = 110, 128

# Host-framework parameter names (operation registry keys).
PARAMETER_NAMES = {
    "temperature": "Temperature",
    "seal_time": "SealTime",
    "seal_force": "SealForce",
    "seal_length": "SealLength",
}


@dataclass
class SealingParameters:
    """
    Parameters sent to the device before every seal.

    Values are held as given; range checks happen in
    protocol.command_composer.validate_and_encode right before sending.
    """

    temperature: int = DEFAULT_TEMPERATURE
    seal_time: Decimal | float = DEFAULT_SEAL_TIME
    seal_force: int = DEFAULT_SEAL_FORCE
    seal_length: int = DEFAULT_SEAL_LENGTH

    def as_operation_parameters(self) -> dict:
        return {PARAMETER_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_operation_parameters(cls, parameters: dict | None, base: "SealingParameters | None" = None):
        """
        Build parameters from a host registry entry such as
        {"Temperature": 170, "SealTime": 2.5}. Missing keys keep `base` values.
        Snake-case keys are accepted as well.
        """
        base = base or cls()
        values = {f.name: getattr(base, f.name) for f in fields(cls)}
        for key, value in (parameters or {}).items():
            for attr, host_name in PARAMETER_NAMES.items():
                if key in (attr, host_name):
                    values[attr] = value
                    break
            else:
                raise KeyError(f"Unknown sealing parameter: {key}")
        return cls(**values)


class SessionState(str, Enum):
    NOT_CONNECTED = "NotConnected"
    CONNECTED = "Connected"
    INITIALIZED = "Initialized"


class SealingRunState(str, Enum):
    IDLE = "Idle"
    CHECKING_READY = "CheckingReady"
    SETTING_PARAMETERS = "SettingParameters"
    WAITING_TEMPERATURE = "WaitingTemperature"
    SEALING = "Sealing"
    WAITING_COMPLETE = "WaitingComplete"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class SealingRun:
    """State of one start-sealing invocation."""

    parameters: SealingParameters
    state: SealingRunState = SealingRunState.IDLE
    history: list[SealingRunState] = field(default_factory=lambda: [SealingRunState.IDLE])
    error: str | None = None

    def advance(self, state: SealingRunState) -> None:
        self.state = state
        self.history.append(state)

    def fail(self, exc: BaseException) -> None:
        self.error = str(exc)
        self.advance(SealingRunState.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.state is SealingRunState.DONE
