"""Persistence boundary: plain-record snapshots and the sink protocol.

Usage:
    from roomlayout.persistence import SnapshotSink, StoreSnapshot

    class MySink:
        def save(self, snapshot: StoreSnapshot) -> None:
            ...
"""

from roomlayout.persistence.models import PlainRecords, StoreSnapshot
from roomlayout.persistence.protocol import SnapshotSink

__all__ = [
    "SnapshotSink",
    "StoreSnapshot",
    "PlainRecords",
]
