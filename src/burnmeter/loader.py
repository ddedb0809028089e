from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import structlog

from burnmeter.dedup import DeduplicationStore
from burnmeter.models import UsageRecord
from burnmeter.parser import iter_records

logger = structlog.get_logger()

LOG_SUFFIX = ".jsonl"


@dataclass
class LoadResult:
    # deduplicated records in file order, then line order
    records: "list[UsageRecord]" = field(default_factory=list)
    files_scanned: "int" = 0
    duplicates_skipped: "int" = 0


def _list_dir(path: "Path") -> "list[Path]":
    try:
        return sorted(path.iterdir())
    except OSError as exc:
        logger.debug("log_dir_unreadable", path=str(path), error=str(exc))
        return []


def discover_log_files(base_dirs: "Iterable[Path]") -> "list[Path]":
    """
    enumerates <base>/<project>/*.jsonl for every base directory.
    Missing or unreadable directories, and entries that are not
    directories where one is expected, are skipped.
    """
    files: "list[Path]" = []
    for base in base_dirs:
        for project in _list_dir(Path(base)):
            if not project.is_dir():
                continue
            files.extend(
                p for p in _list_dir(project) if p.suffix == LOG_SUFFIX and p.is_file()
            )
    return files


def read_log_file(path: "Path") -> "list[UsageRecord]":
    """
    parses every usage record in a log file. A file that cannot be
    opened is treated as empty.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return list(iter_records(f, session_id=path.stem))
    except OSError as exc:
        logger.debug("log_file_unreadable", path=str(path), error=str(exc))
        return []


class LogLoader:
    """
    LogLoader discovers usage log files, parses them on a thread
    pool and merges the results through a DeduplicationStore.

    Files are merged in a fixed order, files of the preferred
    session first, so that which copy of a duplicated record
    survives does not depend on thread scheduling.
    """

    def __init__(
        self,
        store: "DeduplicationStore | None" = None,
        max_workers: "int | None" = None,
    ) -> "None":
        self._store = store if store is not None else DeduplicationStore()
        self._max_workers = max_workers

    def load(
        self,
        base_dirs: "Iterable[Path]",
        preferred_session: "str | None" = None,
    ) -> "LoadResult":
        files = discover_log_files(base_dirs)
        files.sort(key=lambda p: (p.stem != preferred_session, str(p)))
        logger.debug("log_files_discovered", count=len(files))

        result = LoadResult(files_scanned=len(files))
        if not files:
            return result

        parsed_total = 0
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            # map() yields in submission order, keeping the merge deterministic
            for records in pool.map(read_log_file, files):
                parsed_total += len(records)
                result.records.extend(self._store.filter(records))

        result.duplicates_skipped = parsed_total - len(result.records)
        logger.debug(
            "records_loaded",
            files=result.files_scanned,
            records=len(result.records),
            duplicates=result.duplicates_skipped,
            unique_keys=len(self._store),
        )
        return result
