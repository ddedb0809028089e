from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

# both the maximum span of a session block and the maximum
# gap between two consecutive records inside one block
BLOCK_CEILING = timedelta(hours=5)


@dataclass(frozen=True, slots=True)
class TokenCounts:
    """
    TokenCounts holds the four token categories reported for
    one API call. Each count is independently optional: a missing
    count means "not reported", which is different from zero.
    """

    input: "int | None" = None
    output: "int | None" = None
    cache_creation: "int | None" = None
    cache_read: "int | None" = None

    def __post_init__(self) -> "None":
        for name in ("input", "output", "cache_creation", "cache_read"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} token count must be non-negative")

    @property
    def non_cache_total(self) -> "int":
        return (self.input or 0) + (self.output or 0)


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """
    UsageRecord represents a single logged API call
    read from a usage log file.
    """

    timestamp: "datetime | None" = None
    model_name: "str | None" = None
    token_counts: "TokenCounts | None" = None
    # when present, overrides any token based computation
    precomputed_cost: "Decimal | None" = None
    message_id: "str | None" = None
    request_id: "str | None" = None
    # stem of the log file the record was read from
    session_id: "str | None" = None


@dataclass(frozen=True, slots=True)
class PricingRecord:
    """
    PricingRecord holds per-token USD rates for one model.
    An absent rate contributes zero cost.
    """

    input_cost_per_token: "Decimal | None" = None
    output_cost_per_token: "Decimal | None" = None
    cache_creation_input_token_cost: "Decimal | None" = None
    cache_read_input_token_cost: "Decimal | None" = None


@dataclass(frozen=True, slots=True)
class SessionBlock:
    """
    SessionBlock is a run of chronologically adjacent records
    that fits inside one BLOCK_CEILING window starting at the
    top of the hour of its first record.
    """

    start: "datetime"
    records: "tuple[UsageRecord, ...]"

    @property
    def end_of_window(self) -> "datetime":
        return self.start + BLOCK_CEILING

    @property
    def first_activity(self) -> "datetime":
        return self.records[0].timestamp

    @property
    def last_activity(self) -> "datetime":
        return self.records[-1].timestamp

    def is_active(self, now: "datetime") -> "bool":
        return now < self.end_of_window and now - self.last_activity < BLOCK_CEILING


@dataclass(frozen=True, slots=True)
class HookInput:
    """
    HookInput is the part of the assistant's status line hook
    payload the aggregator needs.
    """

    session_id: "str"
    transcript_path: "str"
