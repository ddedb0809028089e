import threading
from typing import Iterable, Iterator

from burnmeter.models import UsageRecord


class DeduplicationStore:
    """
    DeduplicationStore: Is a thread-safe store for tracking
    usage records that have already been counted.

    Prevents double-counting a record that was logged into more
    than one file by maintaining a set of message_id:request_id
    keys. Records missing either id carry no key and always pass.
    """

    def __init__(self) -> "None":
        self._lock: "threading.Lock" = threading.Lock()
        self._seen: "set[str]" = set()

    @staticmethod
    def make_key(message_id: "str | None", request_id: "str | None") -> "str | None":
        """
        constructs the dedup key of a record, or None when either id
        is absent.
        """
        if not message_id or not request_id:
            return None
        return f"{message_id}:{request_id}"

    def is_new(self, key: "str") -> "bool":
        """
        checks if the given key is new. If so, mark it as seen
        and returns True.
        """
        # check and insert under one lock so two producers can
        # never both see the same key as first
        with self._lock:
            if key in self._seen:
                return False

            self._seen.add(key)
            return True

    def filter(self, records: "Iterable[UsageRecord]") -> "Iterator[UsageRecord]":
        """
        yields the records that are seen for the first time, keeping
        their relative order.
        """
        for record in records:
            key = self.make_key(record.message_id, record.request_id)
            if key is None or self.is_new(key):
                yield record

    def __len__(self) -> "int":
        with self._lock:
            return len(self._seen)
