import os
from dataclasses import dataclass, field

from burnmeter.context import DEFAULT_CONTEXT_WINDOW


def _int_env(name: "str", default: "int | None") -> "int | None":
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass
class Config:
    # CLAUDE_CONFIG_DIR entries; empty means the default locations
    config_dirs: "list[str]" = field(default_factory=list)
    context_window: "int" = DEFAULT_CONTEXT_WINDOW
    # thread pool size for log parsing, executor default when None
    workers: "int | None" = None
    log_level: "str" = "warning"

    # hook input file; stdin when empty
    input_path: "str" = ""
    metrics_textfile: "str" = ""

    @classmethod
    def from_env(cls) -> "Config":
        raw_dirs = os.environ.get("CLAUDE_CONFIG_DIR", "")
        return cls(
            config_dirs=[d.strip() for d in raw_dirs.split(",") if d.strip()],
            context_window=_int_env("BURNMETER_CONTEXT_WINDOW", DEFAULT_CONTEXT_WINDOW),
            workers=_int_env("BURNMETER_WORKERS", None),
        )

    @property
    def metrics_enabled(self) -> "bool":
        return bool(self.metrics_textfile)
