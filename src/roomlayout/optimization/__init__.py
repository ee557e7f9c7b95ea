"""Simulated-annealing optimizer for reconciled layouts."""

from roomlayout.optimization.annealing import AnnealingOptimizer, Layout, RandomSource, accepts
from roomlayout.optimization.models import OptimizationResult

__all__ = [
    "AnnealingOptimizer",
    "Layout",
    "OptimizationResult",
    "RandomSource",
    "accepts",
]
