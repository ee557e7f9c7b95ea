"""Shared test fixtures."""

import itertools
import sys
from collections.abc import Callable
from typing import Any

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from roomlayout import (
    BaseReconciler,
    EnergySettings,
    LayoutStores,
    OptimizerSettings,
    Workspace,
)

KITCHEN = {"name": "kitchen", "color": "#ff7373", "size": 1}
STORAGE = {"name": "storage", "color": "#fc8332", "size": 1}


def make_spec(
    size: int,
    rooms: list[dict[str, Any]] | None = None,
    links: list[tuple[str, str]] | None = None,
    unusable: set[tuple[int, int]] | None = None,
    assigned: dict[tuple[int, int], str] | None = None,
) -> dict[str, Any]:
    """Boundary-shaped Base spec for a size x size grid."""
    unusable = unusable or set()
    assigned = assigned or {}
    cells = []
    for i in range(size):
        row = []
        for j in range(size):
            cell: dict[str, Any] = {"usable": (i, j) not in unusable}
            if (i, j) in assigned:
                cell["roomName"] = assigned[(i, j)]
            row.append(cell)
        cells.append(row)
    return {
        "cells": cells,
        "rooms": [dict(room) for room in rooms or []],
        "links": [{"roomNames": list(pair)} for pair in links or []],
    }


@pytest.fixture
def spec_factory() -> Callable[..., dict[str, Any]]:
    return make_spec


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def stores(id_factory) -> LayoutStores:
    return LayoutStores(id_factory=id_factory)


@pytest.fixture
def reconciler(stores) -> BaseReconciler:
    return BaseReconciler(stores)


@pytest.fixture
def workspace(stores) -> Workspace:
    """Workspace with default weights and a seeded optimizer."""
    return Workspace(
        stores=stores,
        energy=EnergySettings(),
        optimizer=OptimizerSettings(iterations=256, seed=7),
    )


@pytest.fixture
def kitchen_storage_spec() -> dict[str, Any]:
    """2x2 usable grid with kitchen and storage linked to each other."""
    return make_spec(2, rooms=[KITCHEN, STORAGE], links=[("kitchen", "storage")])
