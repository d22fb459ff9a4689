import serial

from domain.errors import CommsError
from infra.config import ConnectionConfig


def format_port(port_input: str) -> str:
    """
    A bare number such as "13" means COM13; anything else ("/dev/ttyUSB0",
    "COM4") is used as given.
    """
    s = str(port_input or "").strip()
    if not s:
        raise ValueError("Port cannot be empty")
    if s.isdigit():
        return f"COM{int(s)}"
    return s


class SerialTransport:
    """
    Raw serial line to the sealer.

    - Opens lazily; the port name may be changed only while closed.
    - read_available() never blocks: it returns whatever is buffered.
    """

    def __init__(self, config: ConnectionConfig, *, serial_factory=serial.Serial):
        self.config = config
        self._port = format_port(config.port) if config.port else None
        self._serial_factory = serial_factory
        self.ser: serial.Serial | None = None

    @property
    def port(self) -> str | None:
        return self._port

    @port.setter
    def port(self, value: str) -> None:
        name = format_port(value)
        if self.is_open and name != self._port:
            raise RuntimeError(f"Cannot change port to {name} while {self._port} is open; disconnect first")
        self._port = name

    @property
    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def open(self) -> None:
        if self.is_open:
            return
        if not self._port:
            raise CommsError("No serial port configured")
        try:
            self.ser = self._serial_factory(
                port=self._port,
                baudrate=self.config.baudrate,
                bytesize=self.config.bytesize,
                parity=self.config.parity,
                stopbits=self.config.stopbits,
                timeout=self.config.timeout,
                write_timeout=self.config.write_timeout,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except (serial.SerialException, OSError) as e:
            self.ser = None
            raise CommsError(f"Failed to open port {self._port}: {e}") from e
        self.ser.reset_input_buffer()

    def close(self) -> None:
        ser, self.ser = self.ser, None
        if ser is not None and ser.is_open:
            ser.close()

    def write(self, data: bytes) -> None:
        if not self.is_open:
            raise CommsError(f"Port {self._port} is not open")
        self.ser.write(data)
        self.ser.flush()

    def read_available(self) -> bytes:
        if not self.is_open:
            raise CommsError(f"Port {self._port} is not open")
        waiting = self.ser.in_waiting
        if not waiting:
            return b""
        return self.ser.read(waiting)
