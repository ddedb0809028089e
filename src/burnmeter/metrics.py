from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

from burnmeter.snapshot import AggregateSnapshot


def create_snapshot_gauges(
    registry: "CollectorRegistry" = REGISTRY,
) -> "dict[str, Gauge]":
    """
    creates the gauge families a snapshot is published into. All
    are labeled by session_id, so an unavailable aggregate is simply
    not exported instead of showing up as zero.
     - today_cost_usd: cost of today's records.
     - session_cost_usd: cost of the named session.
     - block_cost_usd / block_burn_rate_usd_per_hour /
     block_remaining_minutes: the active session block.
     - context_tokens / context_percentage / context_window_tokens:
     context window usage and the window it is measured against.
    """
    gauges = {
        "today_cost_usd": "Cost in USD of today's usage",
        "session_cost_usd": "Cost in USD of the current session",
        "block_cost_usd": "Cost in USD of the active session block",
        "block_burn_rate_usd_per_hour": "Projected cost per hour of the active block",
        "block_remaining_minutes": "Minutes left in the active block window",
        "context_tokens": "Input tokens in the current context window",
        "context_percentage": "Share of the context window in use",
        "context_window_tokens": "Size of the context window in tokens",
    }
    return {
        name: Gauge(
            f"burnmeter_{name}",
            help_text,
            ["session_id"],
            registry=registry,
        )
        for name, help_text in gauges.items()
    }


class SnapshotMetrics:
    """
    applies AggregateSnapshot data and loader statistics to
    Prometheus metrics.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._registry: "CollectorRegistry" = registry
        self._gauges: "dict[str, Gauge]" = create_snapshot_gauges(registry)
        self._load_duration: "Histogram" = Histogram(
            "burnmeter_load_duration_seconds",
            "Duration of log discovery, parsing and deduplication",
            registry=registry,
        )
        self._records: "Counter" = Counter(
            "burnmeter_records_total",
            "Usage records read from log files by outcome",
            ["outcome"],
            registry=registry,
        )
        self._aggregate_errors: "Counter" = Counter(
            "burnmeter_aggregate_errors_total",
            "Aggregates that failed and were reported unavailable",
            ["aggregate"],
            registry=registry,
        )

    def observe_load(
        self,
        duration_seconds: "float",
        kept: "int",
        duplicates: "int",
    ) -> "None":
        self._load_duration.observe(duration_seconds)
        self._records.labels(outcome="kept").inc(kept)
        self._records.labels(outcome="duplicate").inc(duplicates)

    def inc_aggregate_error(self, aggregate: "str") -> "None":
        self._aggregate_errors.labels(aggregate=aggregate).inc()

    def update(self, snapshot: "AggregateSnapshot", session_id: "str") -> "None":
        """
        sets the gauges for every aggregate available in the snapshot.
        """
        g = self._gauges
        g["today_cost_usd"].labels(session_id=session_id).set(
            float(snapshot.today_total.amount)
        )

        if snapshot.session_total is not None:
            g["session_cost_usd"].labels(session_id=session_id).set(
                float(snapshot.session_total.amount)
            )

        block = snapshot.active_block
        if block is not None:
            g["block_cost_usd"].labels(session_id=session_id).set(
                float(block.total_cost.amount)
            )
            if block.burn_rate is not None:
                g["block_burn_rate_usd_per_hour"].labels(session_id=session_id).set(
                    float(block.burn_rate.cost_per_hour)
                )
            if not block.remaining.is_expired:
                g["block_remaining_minutes"].labels(session_id=session_id).set(
                    block.remaining.minutes
                )

        context = snapshot.context_usage
        if context is not None:
            g["context_tokens"].labels(session_id=session_id).set(context.token_count)
            g["context_percentage"].labels(session_id=session_id).set(
                context.percentage
            )
            g["context_window_tokens"].labels(session_id=session_id).set(
                context.window_size
            )

    def write_textfile(self, path: "str") -> "None":
        """
        writes the registry in the text exposition format, for the
        node exporter textfile collector.
        """
        write_to_textfile(path, self._registry)
