"""roomlayout: a reconciling room-layout engine with an annealing optimizer.

Usage:
    from roomlayout import Workspace

    workspace = Workspace()
    base = workspace.create_base({
        "cells": [[{"usable": True}, {"usable": True}], [{"usable": True}, {"usable": True}]],
        "rooms": [
            {"name": "kitchen", "color": "#ff7373", "size": 1},
            {"name": "storage", "color": "#fc8332", "size": 1},
        ],
        "links": [{"roomNames": ["kitchen", "storage"]}],
    })
    assert base.status.state == "READY"
    workspace.optimize(base.id, iterations=256)
"""

__version__ = "0.1.0"

# Configuration
from roomlayout.config import EnergySettings, OptimizerSettings

# Core primitives
from roomlayout.core import Coordinates, Copy, LayoutError, RecordId

# Energy
from roomlayout.energy import EnergyBreakdown, EnergyWeights, compute_energy, energy_breakdown

# Domain model
from roomlayout.models import (
    Base,
    BaseSpec,
    BaseState,
    BaseStatus,
    Cell,
    CellSpec,
    ErrorKind,
    LayoutIssue,
    Link,
    LinkSpec,
    Room,
    RoomSpec,
    SpecValidationError,
    validate_spec,
)

# Optimization
from roomlayout.optimization import AnnealingOptimizer, OptimizationResult, RandomSource

# Persistence boundary
from roomlayout.persistence import SnapshotSink, StoreSnapshot

# Reconciliation
from roomlayout.reconciling import BaseReconciler, ChangeEvent, UnknownStateError

# Storage
from roomlayout.storage import LayoutStores, LocalStore, RecordNotFoundError, Store

# Facade
from roomlayout.workspace import Workspace

__all__ = [
    # Version
    "__version__",
    # Core
    "Copy",
    "Coordinates",
    "RecordId",
    "LayoutError",
    # Models
    "Base",
    "BaseSpec",
    "BaseStatus",
    "BaseState",
    "ErrorKind",
    "LayoutIssue",
    "Room",
    "RoomSpec",
    "Cell",
    "CellSpec",
    "Link",
    "LinkSpec",
    "SpecValidationError",
    "validate_spec",
    # Storage
    "Store",
    "LocalStore",
    "LayoutStores",
    "RecordNotFoundError",
    # Reconciliation
    "BaseReconciler",
    "ChangeEvent",
    "UnknownStateError",
    # Energy
    "EnergyWeights",
    "EnergyBreakdown",
    "compute_energy",
    "energy_breakdown",
    # Optimization
    "AnnealingOptimizer",
    "OptimizationResult",
    "RandomSource",
    # Persistence
    "StoreSnapshot",
    "SnapshotSink",
    # Configuration
    "EnergySettings",
    "OptimizerSettings",
    # Facade
    "Workspace",
]
