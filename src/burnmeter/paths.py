from pathlib import Path
from typing import Iterable

PROJECTS_DIR = "projects"


def default_config_dirs(home: "Path | None" = None) -> "list[Path]":
    home = home if home is not None else Path.home()
    return [home / ".config" / "claude", home / ".claude"]


def discover_base_dirs(
    config_dirs: "Iterable[str | Path]" = (),
    home: "Path | None" = None,
) -> "list[Path]":
    """
    returns the existing <config dir>/projects directories to scan.
    Explicit config dirs replace the default locations entirely.
    Duplicates are dropped, keeping the first occurrence.
    """
    candidates = [Path(d).expanduser() for d in config_dirs]
    if not candidates:
        candidates = default_config_dirs(home)

    base_dirs: "list[Path]" = []
    for candidate in candidates:
        projects = candidate / PROJECTS_DIR
        if projects.is_dir() and projects not in base_dirs:
            base_dirs.append(projects)
    return base_dirs
