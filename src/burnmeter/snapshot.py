from dataclasses import dataclass
from datetime import datetime

from burnmeter.values import BurnRate, ContextUsage, Cost, RemainingTime


@dataclass(frozen=True, slots=True)
class ActiveBlockSummary:
    start: "datetime"
    end_of_window: "datetime"
    total_cost: "Cost"
    # None when the block spans no time yet
    burn_rate: "BurnRate | None"
    remaining: "RemainingTime"


@dataclass(frozen=True, slots=True)
class AggregateSnapshot:
    """
    AggregateSnapshot is the merged result of one run, handed to
    the formatter. A None field means the aggregate is unavailable,
    which is distinct from a zero value.
    """

    today_total: "Cost"
    session_total: "Cost | None" = None
    active_block: "ActiveBlockSummary | None" = None
    context_usage: "ContextUsage | None" = None
