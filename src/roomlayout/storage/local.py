"""Local in-memory record store.

Simple dict-based storage suitable for single-process use and testing.
Every value is deep-copied on the way in and on the way out, which is what
lets the reconciler treat read-mutate-write as safe without locking.

Usage:
    rooms = LocalStore(Room)
    room = rooms.create(Room(spec=spec, owner=base.id))
    room.spec.size = 3
    rooms.put(room)
"""

from __future__ import annotations

import copy as cp
import uuid
from collections.abc import Callable, Iterable
from typing import Any, Generic

from roomlayout.core.types import Copy, RecordId
from roomlayout.storage.protocol import (
    Predicate,
    R,
    RecordNotFoundError,
    Subscriber,
    Unsubscribe,
)


def new_record_id() -> RecordId:
    """Default id factory: a random UUID4 string."""
    return str(uuid.uuid4())


class LocalStore(Generic[R]):
    """In-memory store keyed by record id.

    Structure:
        _records[record_id] = record_instance

    Insertion order is preserved, so list() is deterministic.

    Args:
        record_type: Record class, used to rebuild records in restore().
        records: Initial records, stored as-is (ids must already be set).
        id_factory: Callable producing fresh ids for create().
    """

    def __init__(
        self,
        record_type: type[R],
        records: Iterable[R] = (),
        id_factory: Callable[[], RecordId] = new_record_id,
    ):
        self._record_type = record_type
        self._id_factory = id_factory
        self._records: dict[RecordId, R] = {}
        self._subscribers: list[Subscriber] = []
        for record in records:
            self._records[record.id] = cp.deepcopy(record)

    @property
    def name(self) -> str:
        """Human readable collection name used in error messages."""
        return self._record_type.__name__

    def _notify(self, record_id: RecordId) -> None:
        # Iterate over a copy so subscribers may unsubscribe during delivery.
        for subscriber in list(self._subscribers):
            subscriber(record_id)

    def subscribe(self, subscriber: Subscriber) -> Unsubscribe:
        """Register a callback invoked with the id of every changed record.

        Args:
            subscriber: Callback receiving the affected record id.

        Returns:
            Function that removes the subscription (idempotent).
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def create(self, record: R) -> Copy[R]:
        """Store a new record under a freshly generated id.

        Args:
            record: Record without an id.

        Returns:
            Copy of the stored record, including its new id.

        Raises:
            ValueError: If the record already carries an id.
        """
        if record.id:
            raise ValueError(f"{self.name} to create already has an id: '{record.id}'")
        stored = cp.deepcopy(record)
        stored.id = self._id_factory()
        self._records[stored.id] = stored
        self._notify(stored.id)
        return cp.deepcopy(stored)

    def get(self, record_id: RecordId) -> Copy[R]:
        """Get a copy of a record.

        Raises:
            RecordNotFoundError: If no record has this id.
        """
        if record_id not in self._records:
            raise RecordNotFoundError(record_id, self.name)
        return cp.deepcopy(self._records[record_id])

    def put(self, record: R) -> Copy[R]:
        """Insert or replace a record by id.

        Args:
            record: Record with an id.

        Returns:
            Copy of the stored record.

        Raises:
            ValueError: If the record has no id.
        """
        if not record.id:
            raise ValueError(f"Cannot put a {self.name} without an id; use create()")
        self._records[record.id] = cp.deepcopy(record)
        self._notify(record.id)
        return cp.deepcopy(record)

    def delete(self, record_id: RecordId) -> R:
        """Remove a record.

        Returns:
            The removed record (no longer referenced by the store).

        Raises:
            RecordNotFoundError: If no record has this id.
        """
        if record_id not in self._records:
            raise RecordNotFoundError(record_id, self.name)
        removed = self._records.pop(record_id)
        self._notify(record_id)
        return removed

    def list(self, *predicates: Predicate[R]) -> list[Copy[R]]:
        """Copies of all records satisfying every predicate.

        O(n) scan in insertion order.
        """
        return [
            cp.deepcopy(record)
            for record in self._records.values()
            if all(predicate(record) for predicate in predicates)
        ]

    def exists(self, record_id: RecordId) -> bool:
        """Check if a record with this id is present."""
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> dict[RecordId, dict[str, Any]]:
        """Serialize every record as plain JSON-compatible data keyed by id."""
        return {record_id: record.to_dict() for record_id, record in self._records.items()}

    def restore(self, data: dict[RecordId, dict[str, Any]]) -> None:
        """Replace the store contents from snapshot() output.

        Subscribers are notified once per restored id after all records
        are in place.

        Args:
            data: Mapping of record id to plain record data.

        Raises:
            ValueError: If a key disagrees with the id inside its record.
        """
        records: dict[RecordId, R] = {}
        for record_id, raw in data.items():
            record = self._record_type.from_dict(raw)
            if record.id != record_id:
                raise ValueError(
                    f"{self.name} snapshot key '{record_id}' does not match record id '{record.id}'"
                )
            records[record_id] = record
        self._records = records
        for record_id in records:
            self._notify(record_id)
