import random
from datetime import datetime, timedelta, timezone

from burnmeter.blocks import assemble_blocks, find_active_block, floor_to_hour
from burnmeter.models import BLOCK_CEILING, SessionBlock, UsageRecord

T0 = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def at(offset: "timedelta", **kwargs: "object") -> "UsageRecord":
    return UsageRecord(timestamp=T0 + offset, **kwargs)


class TestFloorToHour:
    def test_floors(self) -> "None":
        ts = datetime(2024, 1, 15, 14, 37, 22, 123, tzinfo=timezone.utc)
        assert floor_to_hour(ts) == datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)

    def test_floors_in_utc(self) -> "None":
        ist = timezone(timedelta(hours=5, minutes=30))
        ts = datetime(2024, 1, 15, 14, 37, tzinfo=ist)
        # 09:07 UTC
        assert floor_to_hour(ts) == datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


class TestAssembleBlocks:
    def test_empty(self) -> "None":
        assert assemble_blocks([]) == []

    def test_single_record(self) -> "None":
        record = at(timedelta(minutes=37))
        blocks = assemble_blocks([record])
        assert blocks == [SessionBlock(start=T0, records=(record,))]
        assert blocks[0].end_of_window == T0 + BLOCK_CEILING
        assert blocks[0].last_activity == record.timestamp

    def test_split_on_span_from_floored_start(self) -> "None":
        first = at(timedelta(0))
        second = at(timedelta(hours=4, minutes=59))
        third = at(timedelta(hours=9, minutes=58))

        blocks = assemble_blocks([first, second, third])

        assert [b.records for b in blocks] == [(first, second), (third,)]
        assert blocks[1].start == T0 + timedelta(hours=9)

    def test_split_on_gap_between_records(self) -> "None":
        first = at(timedelta(minutes=5))
        second = at(timedelta(hours=5, minutes=6))
        blocks = assemble_blocks([first, second])
        assert len(blocks) == 2
        assert blocks[0].last_activity == first.timestamp

    def test_gap_equal_to_ceiling_does_not_split(self) -> "None":
        first = at(timedelta(0))
        second = at(BLOCK_CEILING)
        blocks = assemble_blocks([first, second])
        assert [b.records for b in blocks] == [(first, second)]

    def test_equal_timestamps_are_appended(self) -> "None":
        a = at(timedelta(minutes=1), message_id="a")
        b = at(timedelta(minutes=1), message_id="b")
        blocks = assemble_blocks([a, b])
        assert [b.records for b in blocks] == [(a, b)]

    def test_records_without_timestamp_are_dropped(self) -> "None":
        timed = at(timedelta(minutes=1))
        blocks = assemble_blocks([UsageRecord(message_id="x"), timed])
        assert [b.records for b in blocks] == [(timed,)]

    def test_resorting_reproduces_blocks(self) -> "None":
        offsets = [0, 30, 95, 200, 290, 400, 700, 710, 1500, 1501, 1800]
        records = [
            at(timedelta(minutes=m), message_id=str(i)) for i, m in enumerate(offsets)
        ]
        expected = assemble_blocks(records)

        shuffled = records[:]
        random.Random(7).shuffle(shuffled)
        assert assemble_blocks(shuffled) == expected

    def test_blocks_cover_every_timed_record_once(self) -> "None":
        records = [at(timedelta(minutes=m)) for m in (0, 100, 400, 1000, 1001)]
        blocks = assemble_blocks(records)
        flattened = [r for b in blocks for r in b.records]
        assert flattened == records


class TestActiveBlock:
    def test_active_predicate(self) -> "None":
        block = SessionBlock(start=T0, records=(at(timedelta(hours=1)),))
        assert block.is_active(T0 + timedelta(hours=2)) is True
        # window closed
        assert block.is_active(T0 + BLOCK_CEILING) is False

    def test_inactive_when_last_activity_too_old(self) -> "None":
        # window still open, but last activity is 7h old
        block = SessionBlock(start=T0 + timedelta(hours=6), records=(at(timedelta(0)),))
        assert block.is_active(T0 + timedelta(hours=7)) is False

    def test_find_active_block(self) -> "None":
        old = at(timedelta(0))
        recent = at(timedelta(hours=10))
        blocks = assemble_blocks([old, recent])

        active = find_active_block(blocks, T0 + timedelta(hours=11))
        assert active is blocks[1]

    def test_no_active_block(self) -> "None":
        blocks = assemble_blocks([at(timedelta(0))])
        assert find_active_block(blocks, T0 + timedelta(hours=6)) is None
        assert find_active_block([], T0) is None

    def test_last_qualifying_block_wins(self) -> "None":
        now = T0 + timedelta(hours=1)
        first = SessionBlock(start=T0, records=(at(timedelta(minutes=10)),))
        second = SessionBlock(start=T0, records=(at(timedelta(minutes=20)),))
        assert find_active_block([first, second], now) is second
