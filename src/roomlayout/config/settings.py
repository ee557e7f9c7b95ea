"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the
energy model and the optimizer.

Usage:
    from roomlayout.config import EnergySettings, OptimizerSettings

    # Load from environment variables (ROOMLAYOUT_ENERGY_*, ROOMLAYOUT_OPTIMIZER_*)
    energy = EnergySettings()
    optimizer = OptimizerSettings()

    # Or override with explicit values
    optimizer = OptimizerSettings(iterations=2**10, seed=7)
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from roomlayout.energy.model import EnergyWeights


class EnergySettings(BaseSettings):  # type: ignore[misc]
    """Bucket weights used whenever a Base's energy is computed.

    Attributes:
        center_of_mass_weight: Exponent for the all-pairs bucket.
        intra_room_weight: Exponent for the same-room bucket.
        inter_room_weight: Exponent for the linked-rooms bucket.

    Environment Variables:
        ROOMLAYOUT_ENERGY_CENTER_OF_MASS_WEIGHT
        ROOMLAYOUT_ENERGY_INTRA_ROOM_WEIGHT
        ROOMLAYOUT_ENERGY_INTER_ROOM_WEIGHT
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOMLAYOUT_ENERGY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    center_of_mass_weight: float = Field(default=0.5, gt=0)
    intra_room_weight: float = Field(default=2.0, gt=0)
    inter_room_weight: float = Field(default=1.0, gt=0)

    def weights(self) -> EnergyWeights:
        """Energy model weights built from these settings."""
        return EnergyWeights(
            center_of_mass=self.center_of_mass_weight,
            intra_room=self.intra_room_weight,
            inter_room=self.inter_room_weight,
        )


class OptimizerSettings(BaseSettings):  # type: ignore[misc]
    """Defaults for simulated-annealing runs.

    Attributes:
        iterations: Iteration count used when a caller does not pass one.
        seed: Seed for the default random source (None = nondeterministic).

    Environment Variables:
        ROOMLAYOUT_OPTIMIZER_ITERATIONS
        ROOMLAYOUT_OPTIMIZER_SEED
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOMLAYOUT_OPTIMIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    iterations: int = Field(default=2**12, ge=0)
    seed: int | None = None
