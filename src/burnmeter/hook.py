import json

from burnmeter.errors import HookInputError
from burnmeter.models import HookInput


def parse_hook_input(raw: "str") -> "HookInput":
    """
    parses the status line hook payload. Only session_id and
    transcript_path are used; other fields are ignored.
    """
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise HookInputError(f"Failed to parse input JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise HookInputError("Input JSON must be an object")

    values = {}
    for key in ("session_id", "transcript_path"):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise HookInputError(f"Input JSON is missing '{key}'")
        values[key] = value

    return HookInput(**values)
