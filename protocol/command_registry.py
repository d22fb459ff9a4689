import sealer_command_ids as CMD


PARAMETRIC_TOKENS = (
    CMD.SET_TEMPERATURE,
    CMD.SET_SEAL_TIME,
    CMD.SET_SEAL_FORCE,
    CMD.SET_SEAL_LENGTH,
    CMD.SET_DRIVE_ON,
)


def _is_command_token(name: str, value) -> bool:
    if name.startswith("_") or name.startswith("RESPONSE_"):
        return False
    if not isinstance(value, str):
        return False
    v = value.strip()
    return 0 < len(v) <= 4 and v.isascii()


def _build_command_name_by_token() -> dict[str, str]:
    command_name_by_token: dict[str, str] = {}
    for name, value in vars(CMD).items():
        if _is_command_token(name, value):
            command_name_by_token[value.strip()] = name
    return command_name_by_token


COMMAND_NAME_BY_TOKEN = _build_command_name_by_token()


def command_name(command: str) -> str:
    """
    Resolve a full command (e.g. "A165", "PS=50", "?") to its registry name.
    Exact tokens win over parametric prefixes.
    """
    c = (command or "").strip()
    if c in COMMAND_NAME_BY_TOKEN:
        return COMMAND_NAME_BY_TOKEN[c]

    for token in sorted(PARAMETRIC_TOKENS, key=len, reverse=True):
        if c.startswith(token) and len(c) > len(token):
            return COMMAND_NAME_BY_TOKEN[token]
    return "UNKNOWN"


def is_supported_command(command: str) -> bool:
    return command_name(command) != "UNKNOWN"


def is_status_poll(command: str) -> bool:
    return (command or "").strip() == CMD.STATUS
