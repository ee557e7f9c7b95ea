"""Protocols for the persistence boundary.

These protocols define where the reconciler hands finished state to an
embedding application (browser storage, files, a database).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from roomlayout.persistence.models import StoreSnapshot


@runtime_checkable
class SnapshotSink(Protocol):
    """Receives the full store state after every reconciliation drain.

    Usage:
        class JsonFileSink:
            def save(self, snapshot: StoreSnapshot) -> None:
                path.write_text(json.dumps(snapshot.to_dict()))

        reconciler = BaseReconciler(stores, sink=JsonFileSink())

    Note:
        save() runs synchronously inside the reconciler's drain (after it,
        even when the drain raised). Slow sinks slow down every mutation.
    """

    def save(self, snapshot: StoreSnapshot) -> None:
        """Persist a snapshot.

        Args:
            snapshot: Plain-record state of all four stores.
        """
        ...
