class SealerError(Exception):
    """Base class for every failure raised by the sealer driver."""


class CommsError(SealerError):
    """Port open/write/read failure, or an empty reply."""


class NoResponseError(CommsError):
    """The device did not answer within the settle delay."""


class ProtocolError(SealerError):
    """A reply could not be parsed, or was not what the command expects."""


class ValidationError(SealerError, ValueError):
    """A sealing parameter is outside its domain. Raised before any I/O."""

    def __init__(self, message: str, *, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class ReadinessTimeoutError(SealerError, TimeoutError):
    """A readiness or completion condition never held within its budget."""

    def __init__(self, message: str, *, last_reason: str | None = None):
        if last_reason:
            message = f"{message}. Last status: {last_reason}"
        super().__init__(message)
        self.last_reason = last_reason


class DeviceReportedError(SealerError):
    """The device flagged an error (status Error bit or an 'er' reply)."""

    def __init__(self, message: str, *, flags: list[str] | None = None):
        super().__init__(message)
        self.flags = list(flags or [])
