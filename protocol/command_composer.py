import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP

import sealer_command_ids as CMD
from domain.errors import ValidationError
from domain.sealing_parameters import (
    SealingParameters,
    MIN_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_SEAL_TIME,
    MAX_SEAL_TIME,
    MIN_SEAL_FORCE,
    MAX_SEAL_FORCE,
    MIN_SEAL_LENGTH,
    MAX_SEAL_LENGTH,
)


INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class EncodedCommandSet:
    temperature: str
    seal_time: str
    seal_force: str
    seal_length: str

    def commands(self) -> list[tuple[str, str]]:
        """(command, description) pairs in the order they must be sent."""
        return [
            (self.temperature, f"Setting temperature ({self.temperature})"),
            (self.seal_time, f"Setting seal time ({self.seal_time})"),
            (self.seal_force, f"Setting seal force ({self.seal_force})"),
            (self.seal_length, f"Setting seal length ({self.seal_length})"),
        ]


def _as_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got {value!r}", field=name, value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)
    if isinstance(value, str) and INT_RE.match(value.strip()):
        return int(value.strip())
    raise ValidationError(f"{name} must be an integer, got {value!r}", field=name, value=value)


def _as_decimal(name: str, value) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}", field=name, value=value)
    try:
        # str() first so 2.5 becomes Decimal("2.5") rather than its binary expansion
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}", field=name, value=value) from None
    if not d.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}", field=name, value=value)
    return d


def _check_range(name: str, value, low, high, unit: str) -> None:
    if value < low or value > high:
        raise ValidationError(f"{name} must be between {low} and {high} {unit}, got {value}", field=name, value=value)


def encode_temperature(celsius) -> str:
    t = _as_int("Temperature", celsius)
    _check_range("Temperature", t, MIN_TEMPERATURE, MAX_TEMPERATURE, "°C")
    return f"{CMD.SET_TEMPERATURE}{t:03d}"


def encode_seal_time(seconds) -> str:
    t = _as_decimal("Seal time", seconds)
    _check_range("Seal time", t, MIN_SEAL_TIME, MAX_SEAL_TIME, "seconds")
    # tenths, truncated toward zero
    tenths = int((t * 10).to_integral_value(rounding=ROUND_DOWN))
    return f"{CMD.SET_SEAL_TIME}{tenths:02d}"


def encode_seal_force(kg) -> str:
    f = _as_int("Seal force", kg)
    _check_range("Seal force", f, MIN_SEAL_FORCE, MAX_SEAL_FORCE, "Kg")
    return f"{CMD.SET_SEAL_FORCE}{f}"


def encode_seal_length(mm) -> str:
    length = _as_int("Seal length", mm)
    _check_range("Seal length", length, MIN_SEAL_LENGTH, MAX_SEAL_LENGTH, "mm")
    return f"{CMD.SET_SEAL_LENGTH}{length}"


def encode_drive_on_distance(mm) -> str:
    d = _as_decimal("Drive-on distance", mm)
    if d < 0:
        raise ValidationError(f"Drive-on distance must not be negative, got {d}", field="Drive-on distance", value=mm)
    try:
        text = d.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Drive-on distance is out of range, got {mm!r}", field="Drive-on distance", value=mm) from None
    return f"{CMD.SET_DRIVE_ON}{text}"


def encode_force_sensor(enabled: bool) -> str:
    return CMD.FORCE_SENSOR_ON if enabled else CMD.FORCE_SENSOR_OFF


def validate_and_encode(parameters: SealingParameters) -> EncodedCommandSet:
    """
    Range-check all four sealing parameters and compose their commands.
    Raises ValidationError on the first out-of-domain value; nothing is sent
    by this function.
    """
    return EncodedCommandSet(
        temperature=encode_temperature(parameters.temperature),
        seal_time=encode_seal_time(parameters.seal_time),
        seal_force=encode_seal_force(parameters.seal_force),
        seal_length=encode_seal_length(parameters.seal_length),
    )
