"""Reconciliation: change events, the base queue and the reconciler.

Usage:
    from roomlayout.reconciling import BaseReconciler

    reconciler = BaseReconciler(stores, weights=EnergySettings().weights())
"""

from roomlayout.reconciling.queue import ChangeEvent, ReconcileQueue
from roomlayout.reconciling.reconciler import BaseReconciler, UnknownStateError

__all__ = [
    "BaseReconciler",
    "ChangeEvent",
    "ReconcileQueue",
    "UnknownStateError",
]
