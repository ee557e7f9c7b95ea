"""Core primitives shared by every layer.

Architecture Note:
    core/ holds stateless type aliases and the root exception. Stateful
    services live in storage/, reconciling/ and workspace/.
"""

from roomlayout.core.errors import LayoutError
from roomlayout.core.types import Coordinates, Copy, RecordId

__all__ = [
    "Copy",
    "Coordinates",
    "RecordId",
    "LayoutError",
]
