"""Core type definitions for roomlayout."""

type Copy[T] = T
"""Type alias indicating a value is a copy detached from its store.

When you see `Copy[T]` in a return type, the returned value is a deep copy.
Mutations to this copy do NOT affect stored state. To persist changes,
explicitly write back via `store.put(record)`.
"""

type RecordId = str
"""Identifier generated by a store when a record is created."""

type Coordinates = tuple[int, int]
"""(row, column) position of a cell inside a Base grid."""
