"""Workspace: the call surface over stores, reconciler and optimizer.

Usage:
    workspace = Workspace()

    base = workspace.create_base({
        "cells": [[{"usable": True}, {"usable": True}], [{"usable": True}, {"usable": True}]],
        "rooms": [],
        "links": [],
    })
    workspace.add_room(base.id, "kitchen", "#ff7373", 1)
    workspace.add_room(base.id, "storage", "#fc8332", 1)
    workspace.add_link(base.id, "kitchen", "storage")

    result = workspace.optimize(base.id, iterations=2**10)
    payload = workspace.snapshot().to_dict()
"""

from __future__ import annotations

import dataclasses
import random
import warnings
from collections.abc import Callable
from typing import Any

from roomlayout.config import EnergySettings, OptimizerSettings
from roomlayout.core.types import Coordinates, Copy, RecordId
from roomlayout.energy.model import EnergyWeights
from roomlayout.models import Base, BaseSpec, BaseState, Cell, Link, Room, RoomName
from roomlayout.optimization import AnnealingOptimizer, OptimizationResult, RandomSource
from roomlayout.persistence import SnapshotSink, StoreSnapshot
from roomlayout.reconciling import BaseReconciler
from roomlayout.storage import LayoutStores


class Workspace:
    """Owns the four stores and keeps every Base reconciled.

    Every mutator reads a copy of the Base, edits its spec and writes it
    back; the write triggers reconciliation before the call returns. All
    returned records are copies.

    Args:
        stores: Stores to operate on. Defaults to fresh in-memory stores.
        energy: Energy weights. Defaults to EnergySettings() (environment).
        optimizer: Optimizer defaults. Defaults to OptimizerSettings() (environment).
        sink: Receives a snapshot after every reconciliation and commit.
        rng: Random source for the optimizer. Defaults to
            random.Random(optimizer.seed).
    """

    def __init__(
        self,
        stores: LayoutStores | None = None,
        energy: EnergySettings | None = None,
        optimizer: OptimizerSettings | None = None,
        sink: SnapshotSink | None = None,
        rng: RandomSource | None = None,
    ):
        self._stores = stores or LayoutStores()
        self._energy = energy or EnergySettings()
        self._optimizer = optimizer or OptimizerSettings()
        self._rng: RandomSource = rng if rng is not None else random.Random(self._optimizer.seed)
        self._reconciler = BaseReconciler(self._stores, weights=self._energy.weights(), sink=sink)

    @property
    def stores(self) -> LayoutStores:
        return self._stores

    @property
    def reconciler(self) -> BaseReconciler:
        return self._reconciler

    @property
    def weights(self) -> EnergyWeights:
        return self._reconciler.weights

    # --- bases ----------------------------------------------------------

    def create_base(self, spec: BaseSpec | dict[str, Any]) -> Copy[Base]:
        """Validate a spec, store a new Base and reconcile it.

        Raises:
            SpecValidationError: If the spec is structurally invalid.
        """
        created = self._stores.bases.create(Base.create(spec))
        return self.get_base(created.id)

    def get_base(self, base_id: RecordId) -> Copy[Base]:
        return self._stores.bases.get(base_id)

    def bases(self) -> list[Copy[Base]]:
        return self._stores.bases.list()

    def delete_base(self, base_id: RecordId) -> Base:
        """Delete a Base together with every record it owns."""
        return self._stores.bases.delete(base_id)

    def _edit(self, base_id: RecordId, change: Callable[[Base], Any]) -> Copy[Base]:
        base = self._stores.bases.get(base_id)
        change(base)
        self._stores.bases.put(base)
        return self.get_base(base_id)

    # --- mutators -------------------------------------------------------

    def add_room(self, base_id: RecordId, name: RoomName, color: str, size: int) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.add_room(name, color, size))

    def delete_room(self, base_id: RecordId, index: int) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.delete_room(index))

    def add_link(self, base_id: RecordId, room_a: RoomName, room_b: RoomName) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.add_link(room_a, room_b))

    def delete_link(self, base_id: RecordId, index: int) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.delete_link(index))

    def set_room_name(self, base_id: RecordId, index: int, name: RoomName) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_room_name(index, name))

    def set_room_color(self, base_id: RecordId, index: int, color: str) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_room_color(index, color))

    def set_room_size(self, base_id: RecordId, index: int, size: int) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_room_size(index, size))

    def set_cell_usability(
        self, base_id: RecordId, coordinates: Coordinates, usable: bool
    ) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_cell_usability(coordinates, usable))

    def set_cell_room_name(
        self, base_id: RecordId, coordinates: Coordinates, room_name: RoomName | None
    ) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_cell_room_name(coordinates, room_name))

    def set_link_room_names(
        self, base_id: RecordId, index: int, room_names: tuple[RoomName, RoomName]
    ) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_link_room_names(index, room_names))

    def set_size(self, base_id: RecordId, size: int) -> Copy[Base]:
        return self._edit(base_id, lambda base: base.set_size(size))

    # --- reconciliation and optimization ----------------------------------

    def reconcile(self, base_id: RecordId) -> Copy[Base]:
        """Force a full reconciliation pass over one Base."""
        return self._reconciler.reconcile(base_id)

    def optimize(
        self,
        base_id: RecordId,
        iterations: int | None = None,
        center_of_mass_weight: float | None = None,
        intra_room_weight: float | None = None,
        inter_room_weight: float | None = None,
    ) -> OptimizationResult:
        """Run simulated annealing on a READY Base and store the result if better.

        Weight overrides steer the search only. Weights not given fall back to
        the workspace's energy settings. The result is judged with the
        workspace weights and stored only if its energy is strictly below the
        Base's stored energy, so the stored energy never goes up.

        Raises:
            ValueError: If the Base is not READY or iterations < 0.
        """
        base = self.get_base(base_id)
        if base.status.state != BaseState.READY:
            raise ValueError(f"Base '{base_id}' must be READY to optimize, got {base.status.state}")

        overrides = {
            name: value
            for name, value in (
                ("center_of_mass", center_of_mass_weight),
                ("intra_room", intra_room_weight),
                ("inter_room", inter_room_weight),
            )
            if value is not None
        }
        weights = dataclasses.replace(self.weights, **overrides)
        optimizer = AnnealingOptimizer(weights, rng=self._rng, commit_weights=self.weights)
        result = optimizer.optimize(
            base,
            self.cells(base_id),
            self.links(base_id),
            self._optimizer.iterations if iterations is None else iterations,
        )
        if result.improved and result.energy < base.status.energy:
            self._reconciler.commit(result.base, result.flat_cells())
        return result

    # --- read helpers ------------------------------------------------------

    def rooms(self, base_id: RecordId) -> list[Copy[Room]]:
        """Room records of a Base in spec order."""
        return [self._stores.rooms.get(room_id) for room_id in self.get_base(base_id).status.rooms]

    def links(self, base_id: RecordId) -> list[Copy[Link]]:
        """Link records of a Base in spec order."""
        return [self._stores.links.get(link_id) for link_id in self.get_base(base_id).status.links]

    def cells(self, base_id: RecordId) -> list[list[Copy[Cell]]]:
        """Cell records of a Base in grid order."""
        return [
            [self._stores.cells.get(cell_id) for cell_id in row]
            for row in self.get_base(base_id).status.cells
        ]

    # --- persistence ------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        return self._stores.snapshot()

    def restore(self, snapshot: StoreSnapshot | dict[str, Any], recheck: bool = False) -> None:
        """Replace all stores from a snapshot, then reconcile pending bases.

        Records owned by a Base missing from the snapshot are deleted with a
        warning. Bases saved as READY are not re-checked unless recheck is
        set: their records and stored energy are trusted as saved.

        Args:
            snapshot: A StoreSnapshot or its to_dict() form.
            recheck: Reconcile every restored Base, not only pending ones.
        """
        if not isinstance(snapshot, StoreSnapshot):
            snapshot = StoreSnapshot.from_dict(snapshot)

        with self._reconciler.paused():
            self._stores.restore(snapshot)
            removed = self._reconciler.collect_orphans()
            if recheck:
                for base in self._stores.bases.list():
                    base.status.state = BaseState.RECONCILING
                    self._stores.bases.put(base)
        if removed:
            warnings.warn(
                f"restore() dropped {removed} record(s) owned by bases missing "
                f"from the snapshot.",
                stacklevel=2,
            )
        self._reconciler.reconcile_pending()
