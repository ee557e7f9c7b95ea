"""Change events and the queue of bases awaiting reconciliation.

Store notifications become ChangeEvents; the reconciler turns each event
into queued base ids and drains them in FIFO order on a single writer.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from roomlayout.core.types import RecordId
from roomlayout.storage.stores import Collection


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A record in one of the four collections was created, updated or deleted."""

    collection: Collection
    record_id: RecordId


class ReconcileQueue:
    """FIFO of base ids. An id is pending at most once at a time.

    Pushing an id that is already pending keeps its original position, so
    bases are reconciled in the order they first became dirty.
    """

    def __init__(self) -> None:
        self._pending: deque[RecordId] = deque()
        self._members: set[RecordId] = set()

    def push(self, base_id: RecordId) -> bool:
        """Enqueue a base id.

        Returns:
            True if the id was added, False if it was already pending.
        """
        if base_id in self._members:
            return False
        self._pending.append(base_id)
        self._members.add(base_id)
        return True

    def pop(self) -> RecordId:
        """Dequeue the oldest pending id.

        Raises:
            IndexError: If the queue is empty.
        """
        base_id = self._pending.popleft()
        self._members.discard(base_id)
        return base_id

    def clear(self) -> None:
        self._pending.clear()
        self._members.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __contains__(self, base_id: object) -> bool:
        return base_id in self._members

    def __iter__(self) -> Iterator[RecordId]:
        return iter(list(self._pending))
