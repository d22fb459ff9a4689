import re
from decimal import Decimal, InvalidOperation

import sealer_command_ids as CMD
from domain.device_status import DeviceStatus
from domain.errors import ProtocolError


STATUS_RE = re.compile(r"^[0-9A-Fa-f]{1,2}$")
INT_RE = re.compile(r"^[+-]?\d+$")
DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

ERROR_CODES = {
    1: "VERTICAL_SHUTTLE_DOWN",
    2: "HEATER_UP",
    3: "SHUTTLE_IN",
    4: "CUTTER",
    5: "THERMOCOUPLE",
    6: "OVERHEATING",
    7: "NO_FOIL",
    8: "NO_PLATE",
    9: "FORCE_SENSOR",
}


def decode_status(reply: str) -> DeviceStatus:
    """
    Parse a status reply (one byte as 1-2 hex digits, e.g. "0C").
    """
    s = (reply or "").strip()
    if not STATUS_RE.fullmatch(s):
        raise ProtocolError(f"Failed to parse status response: {reply!r}")
    return DeviceStatus(int(s, 16))


def parse_ack(reply: str) -> tuple[bool, str]:
    """
    Parse a short 'ok'/'er' acknowledgement.
    Returns (is_success, normalized_reply).
    """
    s = (reply or "").strip().lower()
    return s == CMD.RESPONSE_OK, s


def is_error_reply(reply: str) -> bool:
    return (reply or "").strip().lower() == CMD.RESPONSE_ERROR


def parse_int_reply(reply: str, what: str) -> int:
    s = (reply or "").strip()
    if not INT_RE.fullmatch(s):
        raise ProtocolError(f"Invalid {what} value: {reply!r}")
    return int(s)


def parse_decimal_reply(reply: str, what: str) -> Decimal:
    s = (reply or "").strip()
    if not DECIMAL_RE.fullmatch(s):
        raise ProtocolError(f"Invalid {what} value: {reply!r}")
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ProtocolError(f"Invalid {what} value: {reply!r}") from None


def parse_temperature_reply(reply: str) -> int:
    return parse_int_reply(reply, "temperature")


def parse_seal_time_reply(reply: str) -> Decimal:
    return parse_decimal_reply(reply, "sealing time")


def parse_seal_force_reply(reply: str) -> int:
    return parse_int_reply(reply, "sealing force")


def parse_seal_length_reply(reply: str) -> int:
    return parse_int_reply(reply, "seal length")


def parse_drive_on_reply(reply: str) -> Decimal:
    return parse_decimal_reply(reply, "drive distance")


def describe_error_code(code) -> str:
    """
    Format a device fault code, e.g. "Code: 5, Error: THERMOCOUPLE".
    """
    s = str(code).strip()
    try:
        name = ERROR_CODES.get(int(s))
    except ValueError:
        name = None
    return f"Code: {s}, Error: {name or 'Unknown error code'}"
