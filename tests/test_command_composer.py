from decimal import Decimal

import pytest

from domain.errors import ValidationError
from domain.sealing_parameters import SealingParameters
from protocol.command_composer import (
    encode_drive_on_distance,
    encode_force_sensor,
    encode_seal_force,
    encode_seal_length,
    encode_seal_time,
    encode_temperature,
    validate_and_encode,
)


def test_default_parameters_encode_in_send_order():
    encoded = validate_and_encode(SealingParameters())
    assert [c for c, _ in encoded.commands()] == ["A165", "B30", "PS=50", "L=125"]


@pytest.mark.parametrize(
    "seconds, expected",
    [(2.5, "B25"), (9.9, "B99"), (0, "B00"), (0.1, "B01"), ("3.0", "B30"), (Decimal("7.2"), "B72"), (2.55, "B25"), ("0.99", "B09")],
)
def test_seal_time_is_truncated_tenths_zero_padded(seconds, expected):
    assert encode_seal_time(seconds) == expected


@pytest.mark.parametrize("seconds", [10.0, 9.95, -0.1, "abc", True, float("nan")])
def test_seal_time_outside_domain_is_rejected(seconds):
    with pytest.raises(ValidationError):
        encode_seal_time(seconds)


def test_temperature_is_three_digits():
    assert encode_temperature(165) == "A165"
    assert encode_temperature(5) == "A005"
    assert encode_temperature(165.0) == "A165"


@pytest.mark.parametrize("celsius", [-1, 1000, 165.5, "hot", None, False])
def test_temperature_outside_domain_is_rejected(celsius):
    with pytest.raises(ValidationError):
        encode_temperature(celsius)


def test_seal_force_bounds():
    assert encode_seal_force(50) == "PS=50"
    assert encode_seal_force(5) == "PS=5"
    for bad in (4, 51):
        with pytest.raises(ValidationError):
            encode_seal_force(bad)


def test_seal_length_bounds():
    assert encode_seal_length(128) == "L=128"
    assert encode_seal_length(110) == "L=110"
    for bad in (109, 129):
        with pytest.raises(ValidationError):
            encode_seal_length(bad)


def test_validation_error_names_field_and_is_value_error():
    with pytest.raises(ValueError) as exc:
        validate_and_encode(SealingParameters(seal_force=4))
    assert exc.value.field == "Seal force"
    assert exc.value.value == 4


def test_drive_on_and_force_sensor_commands():
    assert encode_drive_on_distance(1.5) == "DO=1.500"
    assert encode_drive_on_distance("0") == "DO=0.000"
    with pytest.raises(ValidationError):
        encode_drive_on_distance(-0.5)
    assert encode_force_sensor(True) == "FS=1"
    assert encode_force_sensor(False) == "FS=0"


def test_drive_on_distance_too_large_for_three_decimals():
    with pytest.raises(ValidationError) as exc:
        encode_drive_on_distance("1e30")
    assert exc.value.field == "Drive-on distance"


@pytest.mark.parametrize("kg", ["+-5", "5-", "--5"])
def test_malformed_integer_strings_are_validation_errors(kg):
    with pytest.raises(ValidationError) as exc:
        encode_seal_force(kg)
    assert exc.value.field == "Seal force"
    assert exc.value.value == kg


def test_signed_integer_strings_are_accepted():
    assert encode_seal_force("+20") == "PS=20"
    assert encode_seal_length(" 115 ") == "L=115"
