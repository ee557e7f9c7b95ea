"""BaseReconciler: derives child records and status from each Base spec.

Any change to any of the four stores marks every Base RECONCILING and
queues it; the queue is then drained on a single writer. Writes made while
draining are recognised by the in-flight guard and do not re-enter.

A pass over one Base runs in a fixed order:
1. rooms: one Room per spec room, matched by position
2. links: one Link per spec link, endpoints resolved by room name
3. cells: one Cell per spec cell; explicit assignments, capacity, auto-fill
4. aggregate: space check, energy, READY

Usage:
    stores = LayoutStores()
    reconciler = BaseReconciler(stores)
    stores.bases.create(Base.create(spec))  # reconciled before create() returns

    with reconciler.paused():
        ...  # batch of writes, no reconciliation
    reconciler.reconcile_pending()
"""

from __future__ import annotations

import copy as cp
import logging
from collections import deque
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Any

from roomlayout.core.errors import LayoutError
from roomlayout.core.types import Coordinates, RecordId
from roomlayout.energy.model import EnergyWeights, compute_energy, grid_from_cells
from roomlayout.models import (
    Base,
    BaseState,
    Cell,
    CellSpec,
    ErrorKind,
    LayoutIssue,
    Link,
    LinkSpec,
    LinkStatus,
    Room,
    RoomName,
    not_enough_space,
    room_not_found,
)
from roomlayout.persistence.protocol import SnapshotSink
from roomlayout.reconciling.queue import ChangeEvent, ReconcileQueue
from roomlayout.storage.local import LocalStore
from roomlayout.storage.stores import Collection, LayoutStores

logger = logging.getLogger(__name__)

CellGrid = list[list[Cell]]


class UnknownStateError(LayoutError, RuntimeError):
    """A queued Base carries a state the reconciler does not know."""

    def __init__(self, base_id: RecordId, state: Any):
        self.base_id = base_id
        self.state = state
        super().__init__(f"Base '{base_id}' has unknown state {state!r}")


@dataclass(slots=True)
class _Slot:
    """A room that still has unfilled capacity during auto-fill."""

    room_id: RecordId
    name: RoomName
    remaining: int


class BaseReconciler:
    """Single-writer reconciliation loop over the four layout stores.

    Args:
        stores: The stores to watch and write.
        weights: Energy weights used for every Base. Defaults to EnergyWeights().
        sink: Receives a snapshot after every drain.
        attach: Subscribe to the stores immediately.
    """

    def __init__(
        self,
        stores: LayoutStores,
        weights: EnergyWeights | None = None,
        sink: SnapshotSink | None = None,
        attach: bool = True,
    ):
        self._stores = stores
        self._weights = weights or EnergyWeights()
        self._sink = sink
        self._queue = ReconcileQueue()
        self._in_flight = False
        self._unsubscribes: list[Any] = []
        if attach:
            self.attach()

    @property
    def stores(self) -> LayoutStores:
        return self._stores

    @property
    def weights(self) -> EnergyWeights:
        return self._weights

    @property
    def in_flight(self) -> bool:
        """True while the reconciler (or a paused() block) is writing."""
        return self._in_flight

    @property
    def queue(self) -> ReconcileQueue:
        return self._queue

    # --- subscriptions ----------------------------------------------------

    def attach(self) -> None:
        """Subscribe to change notifications from all four stores."""
        if self._unsubscribes:
            return
        for collection, store in self._stores.items():
            self._unsubscribes.append(store.subscribe(partial(self._on_change, collection)))

    def detach(self) -> None:
        """Stop listening to the stores."""
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()

    def _on_change(self, collection: Collection, record_id: RecordId) -> None:
        self.notify(ChangeEvent(collection, record_id))

    def notify(self, event: ChangeEvent) -> None:
        """Handle one store change.

        Ignored while in flight. Otherwise collects records orphaned by a
        deleted Base, marks every Base RECONCILING and drains the queue.
        """
        if self._in_flight:
            return
        logger.debug("Change in %s '%s'", event.collection.value, event.record_id)
        with self.paused():
            try:
                if event.collection is Collection.BASE and not self._stores.bases.exists(
                    event.record_id
                ):
                    self.collect_orphans()
                self._mark_all()
                self._drain()
            finally:
                self._persist()

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Hold the in-flight guard so store writes do not trigger reconciliation.

        Nested use is allowed; only the outermost block releases the guard.
        """
        if self._in_flight:
            yield
            return
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def reconcile_pending(self) -> None:
        """Reconcile every Base still in RECONCILING, then persist."""
        with self.paused():
            try:
                for base in self._stores.bases.list():
                    if base.status.state != BaseState.READY:
                        self._queue.push(base.id)
                self._drain()
            finally:
                self._persist()

    def _mark_all(self) -> None:
        bases = self._stores.bases
        for base in bases.list():
            if base.status.state != BaseState.RECONCILING:
                base.status.state = BaseState.RECONCILING
                bases.put(base)
            self._queue.push(base.id)

    def _drain(self) -> None:
        bases = self._stores.bases
        while self._queue:
            base_id = self._queue.pop()
            if not bases.exists(base_id):
                continue
            base = bases.get(base_id)
            if base.status.state == BaseState.READY:
                continue
            if base.status.state != BaseState.RECONCILING:
                raise UnknownStateError(base_id, base.status.state)
            self._reconcile(base)

    def _persist(self) -> None:
        if self._sink is not None:
            self._sink.save(self._stores.snapshot())

    # --- garbage collection ------------------------------------------------

    def collect_orphans(self) -> int:
        """Delete child records whose owning Base no longer exists.

        Returns:
            Number of records deleted.
        """
        live = {base.id for base in self._stores.bases.list()}
        removed = 0
        with self.paused():
            for store in self._stores.children():
                orphans = store.list(lambda r: r.owner is not None and r.owner not in live)
                for record in orphans:
                    store.delete(record.id)
                    removed += 1
        if removed:
            logger.debug("Collected %d orphaned record(s)", removed)
        return removed

    def _sweep(self, store: LocalStore[Any], owner: RecordId, retain: set[RecordId]) -> None:
        """Delete records owned by this Base that its status no longer references."""
        stale = store.list(lambda r: r.owner == owner and r.id not in retain)
        for record in stale:
            store.delete(record.id)
        if stale:
            logger.debug("Swept %d stale %s record(s) of base '%s'", len(stale), store.name, owner)

    # --- one pass -----------------------------------------------------------

    def reconcile(self, base_id: RecordId) -> Base:
        """Run one full pass over a Base regardless of its state.

        Returns:
            The reconciled Base (a copy).

        Raises:
            RecordNotFoundError: If no Base has this id.
        """
        with self.paused():
            return self._reconcile(self._stores.bases.get(base_id))

    def _reconcile(self, base: Base) -> Base:
        logger.debug("Reconciling base '%s'", base.id)
        base.status.errors = []
        room_ids = self._reconcile_rooms(base)
        pairs = self._reconcile_links(base, room_ids)
        grid = self._reconcile_cells(base, room_ids)
        self._reconcile_aggregate(base, grid, pairs)
        return base

    def _record(self, base: Base, issue: LayoutIssue) -> None:
        logger.debug("Base '%s': %s: %s", base.id, issue.kind.value, issue.message)
        base.status.errors.append(issue)

    def _reconcile_rooms(self, base: Base) -> dict[RoomName, RecordId]:
        """Create, update and truncate Room records to match spec.rooms.

        Returns:
            Room id per room name.
        """
        rooms = self._stores.rooms
        status = base.status
        for i, room_spec in enumerate(base.spec.rooms):
            if i >= len(status.rooms):
                created = rooms.create(Room(spec=room_spec, owner=base.id))
                status.rooms.append(created.id)
                continue
            room = rooms.get(status.rooms[i])
            if room.spec != room_spec or room.owner != base.id:
                room.spec = room_spec
                room.owner = base.id
                rooms.put(room)
        del status.rooms[len(base.spec.rooms) :]
        self._sweep(rooms, base.id, set(status.rooms))
        return {
            room_spec.name: room_id
            for room_spec, room_id in zip(base.spec.rooms, status.rooms, strict=True)
        }

    def _reconcile_links(
        self, base: Base, room_ids: dict[RoomName, RecordId]
    ) -> list[tuple[RecordId, RecordId]]:
        """Create, update and truncate Link records to match spec.links.

        A link naming a missing room keeps its record with unresolved ids.

        Returns:
            Resolved room id pairs.
        """
        links = self._stores.links
        status = base.status
        pairs: list[tuple[RecordId, RecordId]] = []
        for i, link_spec in enumerate(base.spec.links):
            resolved = self._resolve_link(base, link_spec, room_ids)
            if resolved is not None:
                pairs.append(resolved)
            if i >= len(status.links):
                created = links.create(
                    Link(spec=link_spec, owner=base.id, status=LinkStatus(room_ids=resolved))
                )
                status.links.append(created.id)
                continue
            link = links.get(status.links[i])
            target = Link(
                spec=link_spec, owner=base.id, status=LinkStatus(room_ids=resolved), id=link.id
            )
            if link != target:
                links.put(target)
        del status.links[len(base.spec.links) :]
        self._sweep(links, base.id, set(status.links))
        return pairs

    def _resolve_link(
        self, base: Base, link_spec: LinkSpec, room_ids: dict[RoomName, RecordId]
    ) -> tuple[RecordId, RecordId] | None:
        a, b = link_spec.room_names
        for name in (a, b):
            if name not in room_ids:
                self._record(
                    base,
                    room_not_found(
                        f"A link connects rooms with names '{a}' and '{b}', "
                        f"but there is no room with the name '{name}'."
                    ),
                )
                return None
        return room_ids[a], room_ids[b]

    def _reconcile_cells(self, base: Base, room_ids: dict[RoomName, RecordId]) -> CellGrid:
        """Create, update and truncate Cell records and settle room assignments."""
        cells = self._stores.cells
        status = base.status
        grid: CellGrid = []
        explicit: set[Coordinates] = set()
        stored: dict[RecordId, Cell] = {}

        for i, row_spec in enumerate(base.spec.cells):
            if i >= len(status.cells):
                status.cells.append([])
            row_ids = status.cells[i]
            row: list[Cell] = []
            for j, cell_spec in enumerate(row_spec):
                if j >= len(row_ids):
                    cell = cells.create(Cell(spec=CellSpec(usable=cell_spec.usable), owner=base.id))
                    row_ids.append(cell.id)
                else:
                    cell = cells.get(row_ids[j])
                    stored[cell.id] = cp.deepcopy(cell)
                cell.owner = base.id
                cell.spec.usable = cell_spec.usable
                if self._resolve_cell(base, (i, j), cell, cell_spec, room_ids):
                    explicit.add((i, j))
                row.append(cell)
            del row_ids[len(row_spec) :]
            grid.append(row)
        del status.cells[len(base.spec.cells) :]

        remaining = self._enforce_capacity(base, grid, explicit, room_ids)
        self._auto_fill(base, grid, remaining, room_ids)

        retain: set[RecordId] = set()
        for row in grid:
            for cell in row:
                retain.add(cell.id)
                if stored.get(cell.id) != cell:
                    cells.put(cell)
        self._sweep(cells, base.id, retain)
        return grid

    def _resolve_cell(
        self,
        base: Base,
        coordinates: Coordinates,
        cell: Cell,
        cell_spec: CellSpec,
        room_ids: dict[RoomName, RecordId],
    ) -> bool:
        """Apply the explicit or previous assignment of one cell.

        Returns:
            True if the cell holds a resolved explicit assignment.
        """
        i, j = coordinates
        name = cell_spec.room_name
        if not cell_spec.usable:
            if name is not None:
                self._record(
                    base,
                    LayoutIssue(
                        ErrorKind.UNUSABLE_CELL_ASSIGNED,
                        f"The cell at coordinates [{i}, {j}] is unusable "
                        f"but is assigned to room '{name}'.",
                    ),
                )
            cell.assign(None, None)
            return False

        if name is not None:
            room_id = room_ids.get(name)
            if room_id is None:
                self._record(
                    base,
                    room_not_found(
                        f"The cell at coordinates [{i}, {j}] is assigned to a room "
                        f"with name '{name}', but there is no such room."
                    ),
                )
                cell.assign(None, None)
                return False
            cell.assign(name, room_id)
            return True

        # Automatic assignments stick to the room name while it exists.
        previous = cell.spec.room_name
        if previous is not None and previous in room_ids:
            cell.assign(previous, room_ids[previous])
        else:
            cell.assign(None, None)
        return False

    def _enforce_capacity(
        self,
        base: Base,
        grid: CellGrid,
        explicit: set[Coordinates],
        room_ids: dict[RoomName, RecordId],
    ) -> dict[RecordId, int]:
        """Charge assignments against room sizes, explicit ones first.

        Explicit assignments past capacity are dropped with an issue;
        automatic ones are released silently.

        Returns:
            Unfilled capacity per room id.
        """
        remaining = {room_ids[room.name]: room.size for room in base.spec.rooms}
        sizes = dict(remaining)

        for i, row in enumerate(grid):
            for j, cell in enumerate(row):
                if (i, j) not in explicit or cell.room_id is None:
                    continue
                if remaining[cell.room_id] <= 0:
                    self._record(
                        base,
                        LayoutIssue(
                            ErrorKind.ROOM_OVER_CAPACITY,
                            f"The cell at coordinates [{i}, {j}] is assigned to room "
                            f"'{cell.spec.room_name}', which already has all of its "
                            f"{sizes[cell.room_id]} cell(s).",
                        ),
                    )
                    cell.assign(None, None)
                    continue
                remaining[cell.room_id] -= 1

        for i, row in enumerate(grid):
            for j, cell in enumerate(row):
                if (i, j) in explicit or cell.room_id is None:
                    continue
                if remaining[cell.room_id] <= 0:
                    cell.assign(None, None)
                    continue
                remaining[cell.room_id] -= 1

        return remaining

    def _auto_fill(
        self,
        base: Base,
        grid: CellGrid,
        remaining: dict[RecordId, int],
        room_ids: dict[RoomName, RecordId],
    ) -> None:
        """Assign free usable cells, row-major, to rooms in spec order."""
        queue: deque[_Slot] = deque()
        for room in base.spec.rooms:
            room_id = room_ids[room.name]
            if remaining[room_id] > 0:
                queue.append(_Slot(room_id, room.name, remaining[room_id]))

        for row in grid:
            for cell in row:
                if not queue:
                    return
                if not cell.spec.usable or cell.room_id is not None:
                    continue
                slot = queue[0]
                cell.assign(slot.name, slot.room_id)
                slot.remaining -= 1
                if slot.remaining == 0:
                    queue.popleft()

    def _reconcile_aggregate(
        self, base: Base, grid: CellGrid, pairs: list[tuple[RecordId, RecordId]]
    ) -> None:
        available = base.spec.usable_cell_count()
        needed = base.spec.total_room_size()
        if available < needed:
            self._record(base, not_enough_space(available, needed))

        base.status.energy = compute_energy(grid_from_cells(grid), pairs, self._weights)
        base.status.state = BaseState.READY
        self._stores.bases.put(base)
        logger.debug(
            "Base '%s' READY (energy=%.4f, %d issue(s))",
            base.id,
            base.status.energy,
            len(base.status.errors),
        )

    # --- external commits -------------------------------------------------

    def commit(self, base: Base, cells: Iterable[Cell]) -> None:
        """Write a Base and its cells without triggering reconciliation.

        Used to store an optimizer result, which is already a valid
        reconciled state. The sink is notified afterwards.
        """
        with self.paused():
            try:
                for cell in cells:
                    self._stores.cells.put(cell)
                self._stores.bases.put(base)
            finally:
                self._persist()
