from datetime import datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from burnmeter.blocks import assemble_blocks, find_active_block
from burnmeter.models import PricingRecord, SessionBlock, UsageRecord
from burnmeter.pricing import PRICING_TABLE, record_cost
from burnmeter.snapshot import ActiveBlockSummary
from burnmeter.values import BurnRate, Cost, RemainingTime

_MICROSECONDS_PER_MINUTE = Decimal(60_000_000)


def _minutes(delta: "timedelta") -> "Decimal":
    return Decimal(delta // timedelta(microseconds=1)) / _MICROSECONDS_PER_MINUTE


def total_cost(
    records: "Iterable[UsageRecord]",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "Cost":
    return Cost.total(record_cost(r, table) for r in records)


def today_total(
    records: "Iterable[UsageRecord]",
    now: "datetime",
    tz: "tzinfo | None" = None,
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "Cost":
    """
    sums the cost of records whose timestamp falls on the calendar
    date of now. Dates are taken in tz, the system local timezone
    when tz is None. Records without a timestamp are left out.
    """
    today = now.astimezone(tz).date()
    return total_cost(
        (
            r
            for r in records
            if r.timestamp is not None and r.timestamp.astimezone(tz).date() == today
        ),
        table,
    )


def session_total(
    records: "Iterable[UsageRecord]",
    session_id: "str",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "Cost | None":
    """
    sums the cost of the records read from the given session's log
    files. Returns None when no record belongs to the session.
    """
    matching = [r for r in records if r.session_id == session_id]
    if not matching:
        return None
    return total_cost(matching, table)


def burn_rate(
    block: "SessionBlock",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "BurnRate | None":
    """
    projects the block's cost per hour over the span between its
    first and last record. A block whose span is not positive has
    no burn rate.
    """
    duration = _minutes(block.last_activity - block.first_activity)
    if duration <= 0:
        return None

    cost = total_cost(block.records, table)
    tokens = sum(
        r.token_counts.non_cache_total for r in block.records if r.token_counts
    )
    return BurnRate(
        cost_per_hour=cost.amount / duration * 60,
        tokens_per_minute=float(tokens / duration),
    )


def remaining_time(block: "SessionBlock", now: "datetime") -> "RemainingTime":
    """
    rounds the time left until the block's window closes to whole
    minutes. Zero or less is reported as expired.
    """
    minutes = _minutes(block.end_of_window - now).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    if minutes <= 0:
        return RemainingTime.expired()
    return RemainingTime(int(minutes))


def active_block_summary(
    records: "Iterable[UsageRecord]",
    now: "datetime",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "ActiveBlockSummary | None":
    """
    assembles session blocks from the records and summarizes the
    active one, if any.
    """
    block = find_active_block(assemble_blocks(records), now)
    if block is None:
        return None
    return ActiveBlockSummary(
        start=block.start,
        end_of_window=block.end_of_window,
        total_cost=total_cost(block.records, table),
        burn_rate=burn_rate(block, table),
        remaining=remaining_time(block, now),
    )
