import logging
from collections.abc import Iterable

from roomlayout import Base, Cell, OptimizerSettings, Workspace


def render(base: Base, cells: Iterable[Iterable[Cell]]) -> str:
    """One character per cell: '#' unusable, '.' free, else the room's initial."""
    lines = []
    for row in cells:
        line = ""
        for cell in row:
            if not cell.spec.usable:
                line += "#"
            elif cell.spec.room_name is None:
                line += "."
            else:
                line += cell.spec.room_name[0]
        lines.append(line)
    return "\n".join(lines)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    workspace = Workspace(optimizer=OptimizerSettings(iterations=2**12, seed=42))

    base = workspace.create_base(
        {
            "cells": [[{"usable": True} for _ in range(4)] for _ in range(4)],
            "rooms": [],
            "links": [],
        }
    )
    base = workspace.set_cell_usability(base.id, (0, 0), False)
    base = workspace.add_room(base.id, "kitchen", "#ff7373", 3)
    base = workspace.add_room(base.id, "storage", "#fc8332", 2)
    base = workspace.add_room(base.id, "bedroom", "#7373ff", 4)
    base = workspace.add_link(base.id, "kitchen", "storage")

    print(f"Reconciled (energy {base.status.energy:.3f}):")
    print(render(base, workspace.cells(base.id)))

    result = workspace.optimize(base.id)
    base = workspace.get_base(base.id)
    print(f"\nOptimized (energy {base.status.energy:.3f}, improved={result.improved}):")
    print(render(base, workspace.cells(base.id)))

    for issue in base.status.errors:
        print(f"{issue.kind.value}: {issue.message}")


if __name__ == "__main__":
    main()
