from dataclasses import dataclass, field, fields
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from domain.sealing_parameters import SealingParameters


REPLY_MODES = ("buffered", "until_idle")


@dataclass
class ConnectionConfig:
    port: str = "13"
    baudrate: int = 9600
    bytesize: int = 8
    parity: str = "N"
    stopbits: int = 1
    timeout: float = 5.0
    write_timeout: float = 5.0


@dataclass
class TimingConfig:
    settle_s: float = 0.15
    reply_mode: str = "until_idle"
    idle_gap_s: float = 0.05
    ready_poll_s: float = 1.0
    ready_timeout_s: float = 300.0
    temperature_poll_s: float = 1.0
    temperature_timeout_s: float = 300.0
    complete_poll_s: float = 0.5
    complete_timeout_s: float = 30.0
    log_busy_reasons: bool = True
    log_temperature_reasons: bool = False

    def __post_init__(self):
        if self.reply_mode not in REPLY_MODES:
            raise ValueError(f"reply_mode must be one of {REPLY_MODES}, got {self.reply_mode!r}")


@dataclass
class SealingDefaults:
    temperature: int = 165
    seal_time: float = 3.0
    seal_force: int = 50
    seal_length: int = 125

    def to_parameters(self) -> SealingParameters:
        return SealingParameters(
            temperature=self.temperature,
            seal_time=Decimal(str(self.seal_time)),
            seal_force=self.seal_force,
            seal_length=self.seal_length,
        )


@dataclass
class SealerConfig:
    device_id: str = "alps5000"
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    sealing: SealingDefaults = field(default_factory=SealingDefaults)


def _known(cls, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (raw or {}).items() if k in names}


def _load_yaml(path: str) -> Dict[str, Any]:
    raw = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw) if raw else {}
    return data or {}


def load_config(path: Optional[str]) -> SealerConfig:
    """
    Read YAML config into a typed SealerConfig with defaults.

    If `path` is None or the file is missing, defaults are used. Unknown keys
    are ignored.
    """
    if not path or not Path(path).exists():
        return SealerConfig()

    data = _load_yaml(path)
    connection = dict(data.get("connection", {}) or {})
    if "port" in connection:
        connection["port"] = str(connection["port"])

    return SealerConfig(
        device_id=str(data.get("device_id", "alps5000")),
        connection=ConnectionConfig(**_known(ConnectionConfig, connection)),
        timing=TimingConfig(**_known(TimingConfig, data.get("timing"))),
        sealing=SealingDefaults(**_known(SealingDefaults, data.get("sealing"))),
    )
