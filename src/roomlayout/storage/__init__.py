"""Storage backends."""

from roomlayout.storage.local import LocalStore, new_record_id
from roomlayout.storage.protocol import Record, RecordNotFoundError, Store
from roomlayout.storage.stores import Collection, LayoutStores

__all__ = [
    "Store",
    "Record",
    "LocalStore",
    "LayoutStores",
    "Collection",
    "RecordNotFoundError",
    "new_record_id",
]
