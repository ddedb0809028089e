from datetime import datetime, timezone
from typing import Iterable, Sequence

from burnmeter.models import BLOCK_CEILING, SessionBlock, UsageRecord


def floor_to_hour(timestamp: "datetime") -> "datetime":
    """
    floors a timestamp to the top of its UTC hour (14:37:22 -> 14:00:00).
    """
    utc = timestamp.astimezone(timezone.utc)
    return utc.replace(minute=0, second=0, microsecond=0)


def assemble_blocks(records: "Iterable[UsageRecord]") -> "list[SessionBlock]":
    """
    partitions records into session blocks. Records without a
    timestamp are dropped; the rest are sorted ascending (stable, so
    equal timestamps keep their input order) and walked once. A new
    block opens when a record lies more than BLOCK_CEILING after the
    floored start of the open block, or more than BLOCK_CEILING after
    the previous record. A gap of exactly BLOCK_CEILING does not split.
    """
    timed = sorted(
        (r for r in records if r.timestamp is not None),
        key=lambda r: r.timestamp,
    )

    blocks: "list[SessionBlock]" = []
    start: "datetime | None" = None
    current: "list[UsageRecord]" = []

    for record in timed:
        if start is not None:
            since_start = record.timestamp - start
            since_last = record.timestamp - current[-1].timestamp
            if since_start > BLOCK_CEILING or since_last > BLOCK_CEILING:
                blocks.append(SessionBlock(start=start, records=tuple(current)))
                start = None

        if start is None:
            start = floor_to_hour(record.timestamp)
            current = []
        current.append(record)

    if start is not None:
        blocks.append(SessionBlock(start=start, records=tuple(current)))

    return blocks


def find_active_block(
    blocks: "Sequence[SessionBlock]",
    now: "datetime",
) -> "SessionBlock | None":
    """
    returns the block whose window still contains now and whose
    last activity is recent enough. If several qualify, the last
    one in chronological order wins.
    """
    active = None
    for block in blocks:
        if block.is_active(now):
            active = block
    return active
