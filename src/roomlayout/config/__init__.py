"""Configuration module using Pydantic Settings.

Provides typed configuration for the energy model and optimizer with
environment variable support.

Usage:
    from roomlayout.config import EnergySettings, OptimizerSettings

    energy = EnergySettings(intra_room_weight=3.0)
    optimizer = OptimizerSettings(iterations=512)
"""

from roomlayout.config.settings import EnergySettings, OptimizerSettings

__all__ = [
    "EnergySettings",
    "OptimizerSettings",
]
