import json
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator

from burnmeter.models import TokenCounts, UsageRecord

# precomputed cost field names, in order of preference
_COST_FIELDS = ("costUSD", "cost_usd", "cost")

# (nested message.usage key, flattened legacy key)
_TOKEN_FIELDS = {
    "input": ("input_tokens", "inputTokens"),
    "output": ("output_tokens", "outputTokens"),
    "cache_creation": ("cache_creation_input_tokens", "cacheCreationTokens"),
    "cache_read": ("cache_read_input_tokens", "cacheReadTokens"),
}


def parse_timestamp(value: "Any") -> "datetime | None":
    """
    parses an ISO-8601 string into an aware datetime. Handles a
    trailing Z and fractional seconds; naive values are taken as UTC.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _count(value: "Any") -> "int | None":
    # bool is an int subclass but never a token count
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return None


def _cost(value: "Any") -> "Decimal | None":
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def _string(value: "Any") -> "str | None":
    if isinstance(value, str) and value:
        return value
    return None


def _token_counts(data: "dict", message: "dict") -> "TokenCounts | None":
    usage = message.get("usage")
    if isinstance(usage, dict):
        counts = {
            name: _count(usage.get(nested))
            for name, (nested, _) in _TOKEN_FIELDS.items()
        }
    else:
        counts = {
            name: _count(data.get(legacy))
            for name, (_, legacy) in _TOKEN_FIELDS.items()
        }
        if all(v is None for v in counts.values()):
            return None
    return TokenCounts(**counts)


def _precomputed_cost(data: "dict", message: "dict") -> "Decimal | None":
    for source in (data, message):
        for field in _COST_FIELDS:
            if field in source:
                cost = _cost(source[field])
                if cost is not None:
                    return cost
    return None


def parse_line(line: "str", session_id: "str | None" = None) -> "UsageRecord | None":
    """
    converts one JSON-lines entry into a UsageRecord. Returns None
    when the line is blank, is not a JSON object, or carries neither
    token counts nor a precomputed cost.
    """
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    message = data.get("message")
    if not isinstance(message, dict):
        message = {}

    token_counts = _token_counts(data, message)
    precomputed_cost = _precomputed_cost(data, message)
    if token_counts is None and precomputed_cost is None:
        return None

    return UsageRecord(
        timestamp=parse_timestamp(data.get("timestamp", message.get("timestamp"))),
        model_name=_string(message.get("model")) or _string(data.get("model")),
        token_counts=token_counts,
        precomputed_cost=precomputed_cost,
        message_id=_string(message.get("id")),
        request_id=_string(data.get("requestId")) or _string(data.get("request_id")),
        session_id=session_id,
    )


def iter_records(
    lines: "Iterable[str]",
    session_id: "str | None" = None,
) -> "Iterator[UsageRecord]":
    """
    yields the lines that parse into usage records, skipping the rest.
    """
    for line in lines:
        record = parse_line(line, session_id)
        if record is not None:
            yield record
