"""Data models for optimizer runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from roomlayout.models import Base, Cell


@dataclass(slots=True)
class OptimizationResult:
    """Outcome of one annealing run.

    Attributes:
        base: The Base to store. The input Base when not improved.
        cells: Cell records in grid order. The input cells when not improved.
        entry_energy: Energy of the input layout under the commit weights.
        energy: Energy of the returned layout under the commit weights.
        improved: True if a strictly lower-energy layout was found.
        iterations: Iterations actually performed.
    """

    base: Base
    cells: list[list[Cell]] = field(default_factory=list)
    entry_energy: float = 0.0
    energy: float = 0.0
    improved: bool = False
    iterations: int = 0

    def flat_cells(self) -> list[Cell]:
        return [cell for row in self.cells for cell in row]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "base": self.base.to_dict(),
            "cells": [[cell.to_dict() for cell in row] for row in self.cells],
            "entry_energy": self.entry_energy,
            "energy": self.energy,
            "improved": self.improved,
            "iterations": self.iterations,
        }
