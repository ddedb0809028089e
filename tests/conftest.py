import json
from pathlib import Path
from typing import Callable

import pytest
from prometheus_client import CollectorRegistry


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture()
def projects_dir(tmp_path: "Path") -> "Path":
    path = tmp_path / "projects"
    path.mkdir()
    return path


@pytest.fixture()
def write_log(projects_dir: "Path") -> "Callable[..., Path]":
    """
    writes JSON-lines log files under projects_dir/<project>/.
    Entries may be dicts (serialized) or raw strings (written as is).
    """

    def _write(project: "str", session: "str", entries: "list") -> "Path":
        path = projects_dir / project / f"{session}.jsonl"
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [e if isinstance(e, str) else json.dumps(e) for e in entries]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


def usage_entry(
    timestamp: "str",
    cost: "float | None" = None,
    message_id: "str | None" = None,
    request_id: "str | None" = None,
    model: "str" = "claude-sonnet-4-20250514",
    input_tokens: "int | None" = None,
    output_tokens: "int | None" = None,
) -> "dict":
    """
    builds a log entry in the nested message.usage shape.
    """
    message: "dict" = {"model": model}
    if message_id is not None:
        message["id"] = message_id
    if input_tokens is not None or output_tokens is not None:
        message["usage"] = {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
        }
    entry: "dict" = {"timestamp": timestamp, "message": message}
    if cost is not None:
        entry["costUSD"] = cost
    if request_id is not None:
        entry["requestId"] = request_id
    return entry
