from dataclasses import dataclass


STATUS_BITS: tuple[tuple[int, str], ...] = (
    (0, "No Fail"),
    (1, "Error"),
    (2, "Busy"),
    (3, "Not At Seal Temperature"),
    (4, "Plate Not Present"),
    (5, "Not Initialised"),
    (6, "Force Sensor activated"),
    (7, "Park Mode"),
)

NO_FAIL_BIT = 0
ERROR_BIT = 1
BUSY_BIT = 2
NOT_AT_SEAL_TEMPERATURE_BIT = 3
PLATE_NOT_PRESENT_BIT = 4
NOT_INITIALISED_BIT = 5
FORCE_SENSOR_BIT = 6
PARK_MODE_BIT = 7


def is_bit_set(status: int, bit: int) -> bool:
    if not 0 <= bit <= 7:
        raise ValueError(f"status bit must be in 0..7, got {bit}")
    return (int(status) & (1 << bit)) != 0


@dataclass(frozen=True)
class DeviceStatus:
    """
    Decoded status byte as reported by the '?' query.

    All flags are derived from `raw`; the object is immutable.
    """

    raw: int

    def __post_init__(self):
        if not 0 <= self.raw <= 0xFF:
            raise ValueError(f"status byte out of range: {self.raw}")

    def is_set(self, bit: int) -> bool:
        return is_bit_set(self.raw, bit)

    @property
    def no_fail(self) -> bool:
        return self.is_set(NO_FAIL_BIT)

    @property
    def error(self) -> bool:
        return self.is_set(ERROR_BIT)

    @property
    def busy(self) -> bool:
        return self.is_set(BUSY_BIT)

    @property
    def not_at_seal_temperature(self) -> bool:
        return self.is_set(NOT_AT_SEAL_TEMPERATURE_BIT)

    @property
    def plate_not_present(self) -> bool:
        return self.is_set(PLATE_NOT_PRESENT_BIT)

    @property
    def not_initialised(self) -> bool:
        return self.is_set(NOT_INITIALISED_BIT)

    @property
    def force_sensor_activated(self) -> bool:
        return self.is_set(FORCE_SENSOR_BIT)

    @property
    def park_mode(self) -> bool:
        return self.is_set(PARK_MODE_BIT)

    def describe_active(self, exclude_no_fail: bool = True) -> list[str]:
        return describe_active(self, exclude_no_fail=exclude_no_fail)

    def __str__(self) -> str:
        active = self.describe_active(exclude_no_fail=False)
        return f"0x{self.raw:02X} ({', '.join(active) if active else 'no flags'})"


def describe_active(status: DeviceStatus | int, exclude_no_fail: bool = True) -> list[str]:
    """
    Descriptions of the flags set in `status`, in bit order.
    """
    raw = status.raw if isinstance(status, DeviceStatus) else int(status)
    return [
        description
        for bit, description in STATUS_BITS
        if is_bit_set(raw, bit) and not (exclude_no_fail and bit == NO_FAIL_BIT)
    ]
