import json
from pathlib import Path

import structlog

from burnmeter.values import ContextUsage

logger = structlog.get_logger()

DEFAULT_CONTEXT_WINDOW = 200_000
MAX_CONTEXT_PERCENTAGE = 9999


def _input_total(line: "str") -> "int | None":
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict) or data.get("type") != "assistant":
        return None

    message = data.get("message")
    usage = message.get("usage") if isinstance(message, dict) else None
    if not isinstance(usage, dict):
        return None

    input_tokens = usage.get("input_tokens")
    if (
        not isinstance(input_tokens, int)
        or isinstance(input_tokens, bool)
        or input_tokens < 0
    ):
        return None

    total = input_tokens
    for key in ("cache_creation_input_tokens", "cache_read_input_tokens"):
        value = usage.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            total += value
    return total


def load_context_usage(
    transcript_path: "str | Path",
    window_size: "int" = DEFAULT_CONTEXT_WINDOW,
) -> "ContextUsage | None":
    """
    reads a session transcript newest line first and returns the
    context usage reported by the most recent assistant message that
    carries usage data. Returns None when the transcript cannot be
    read or holds no such message.
    """
    try:
        lines = Path(transcript_path).read_text(
            encoding="utf-8", errors="replace"
        ).splitlines()
    except OSError as exc:
        logger.debug(
            "transcript_unreadable", path=str(transcript_path), error=str(exc)
        )
        return None

    for line in reversed(lines):
        if not line.strip():
            continue
        total = _input_total(line)
        if total is None:
            continue
        return ContextUsage(
            token_count=total,
            percentage=min(total * 100 // window_size, MAX_CONTEXT_PERCENTAGE),
            window_size=window_size,
        )

    return None
