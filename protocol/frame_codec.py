import re


TERMINATOR = b"\r"
COMMAND_RE = re.compile(r"^[\x21-\x7E]+$")


def is_valid_command(command: str) -> bool:
    """
    Returns True only for printable ASCII commands without whitespace.
    """
    return isinstance(command, str) and COMMAND_RE.fullmatch(command) is not None


def compose_frame(command: str) -> bytes:
    """
    Compose a framed command according to:
      <COMMAND>\\r

    Any CR/LF characters and surrounding whitespace are stripped from the
    command before framing.
    """
    payload = (command or "").replace("\r", "").replace("\n", "").strip()
    if not is_valid_command(payload):
        raise ValueError(f"command must be printable ASCII without spaces, got {command!r}")
    return payload.encode("ascii") + TERMINATOR


def decode_reply(raw: bytes) -> str:
    """
    Decode raw reply bytes into trimmed text.

    Replies have no terminator; whatever was buffered is decoded as ASCII and
    surrounding whitespace (including stray CR/LF) is removed.
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError("raw reply must be bytes")
    return bytes(raw).decode("ascii", errors="ignore").strip()
