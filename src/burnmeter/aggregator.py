import asyncio
import time
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Callable, Sequence

import structlog

from burnmeter.calculators import active_block_summary, session_total, today_total
from burnmeter.context import DEFAULT_CONTEXT_WINDOW, load_context_usage
from burnmeter.errors import NoDataDirectoryError
from burnmeter.loader import LoadResult, LogLoader
from burnmeter.metrics import SnapshotMetrics
from burnmeter.models import HookInput
from burnmeter.snapshot import AggregateSnapshot

logger = structlog.get_logger()


def _utc_now() -> "datetime":
    return datetime.now(timezone.utc)


class Aggregator:
    """
    Aggregator is responsible for orchestrating one run: it loads
    and deduplicates every usage log under the base directories,
    then computes today's total, the session total, the active
    block and the context usage, and merges them into one
    AggregateSnapshot. Independent computations run concurrently
    on worker threads.
    """

    def __init__(
        self,
        base_dirs: "Sequence[Path]",
        loader: "LogLoader | None" = None,
        metrics: "SnapshotMetrics | None" = None,
        context_window: "int" = DEFAULT_CONTEXT_WINDOW,
        clock: "Callable[[], datetime]" = _utc_now,
        tz: "tzinfo | None" = None,
    ) -> "None":
        self._base_dirs = list(base_dirs)
        self._loader = loader if loader is not None else LogLoader()
        self._metrics = metrics
        self._context_window = context_window
        self._clock = clock
        # timezone for the "today" boundary, system local when None
        self._tz = tz

    async def run(self, hook: "HookInput") -> "AggregateSnapshot":
        """
        computes the snapshot for the given hook input. Raises
        NoDataDirectoryError when there is no base directory to scan.
        """
        if not self._base_dirs:
            raise NoDataDirectoryError()

        now = self._clock()
        logger.debug("aggregation_start", session_id=hook.session_id)

        # the context scan reads only the transcript, so it runs
        # alongside the log load
        load_result, context_usage = await asyncio.gather(
            asyncio.to_thread(self._load, hook.session_id),
            self._guarded(
                "context_usage",
                load_context_usage,
                hook.transcript_path,
                self._context_window,
            ),
        )
        records = load_result.records

        today, session, block = await asyncio.gather(
            asyncio.to_thread(today_total, records, now, self._tz),
            self._guarded("session_total", session_total, records, hook.session_id),
            self._guarded("active_block", active_block_summary, records, now),
        )

        snapshot = AggregateSnapshot(
            today_total=today,
            session_total=session,
            active_block=block,
            context_usage=context_usage,
        )
        if self._metrics is not None:
            self._metrics.update(snapshot, hook.session_id)

        logger.debug("aggregation_end", session_id=hook.session_id)
        return snapshot

    def _load(self, session_id: "str") -> "LoadResult":
        load_start = time.monotonic()
        result = self._loader.load(self._base_dirs, preferred_session=session_id)
        if self._metrics is not None:
            self._metrics.observe_load(
                time.monotonic() - load_start,
                kept=len(result.records),
                duplicates=result.duplicates_skipped,
            )
        return result

    async def _guarded(
        self,
        aggregate: "str",
        func: "Callable[..., Any]",
        *args: "Any",
    ) -> "Any":
        """
        runs func on a worker thread. An unexpected failure is logged
        and the aggregate is reported unavailable instead of failing
        the whole run.
        """
        try:
            return await asyncio.to_thread(func, *args)
        except Exception:
            logger.exception("aggregate_failed", aggregate=aggregate)
            if self._metrics is not None:
                self._metrics.inc_aggregate_error(aggregate)
            return None
