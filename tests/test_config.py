from decimal import Decimal

import pytest

from infra.config import SealerConfig, TimingConfig, load_config


def test_defaults_when_no_file(tmp_path):
    assert load_config(None) == SealerConfig()
    assert load_config(str(tmp_path / "missing.yaml")) == SealerConfig()


def test_default_values():
    cfg = SealerConfig()
    assert cfg.connection.baudrate == 9600
    assert cfg.connection.parity == "N"
    assert cfg.timing.settle_s == 0.15
    assert cfg.timing.reply_mode == "until_idle"
    assert cfg.timing.ready_timeout_s == 300.0
    assert cfg.timing.complete_poll_s == 0.5
    assert cfg.sealing.to_parameters().seal_time == Decimal("3.0")


def test_yaml_overrides_and_unknown_keys(tmp_path):
    path = tmp_path / "sealer.yaml"
    path.write_text(
        "device_id: bench-sealer\n"
        "connection:\n"
        "  port: 7\n"
        "  flow_control: none\n"
        "timing:\n"
        "  reply_mode: buffered\n"
        "  ready_timeout_s: 60\n"
        "sealing:\n"
        "  temperature: 170\n"
        "  seal_time: 2.5\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.device_id == "bench-sealer"
    assert cfg.connection.port == "7"
    assert cfg.connection.baudrate == 9600
    assert cfg.timing.reply_mode == "buffered"
    assert cfg.timing.ready_timeout_s == 60
    params = cfg.sealing.to_parameters()
    assert params.temperature == 170
    assert params.seal_time == Decimal("2.5")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == SealerConfig()


def test_unknown_reply_mode_is_rejected():
    with pytest.raises(ValueError):
        TimingConfig(reply_mode="line")
