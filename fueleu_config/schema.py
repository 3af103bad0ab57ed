"""
Regulation parameter schema.

``RegulationParameters`` is the runtime artifact: a frozen, validated view of
``regulation.yaml``.  Engines receive it by injection and never read files
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TargetIntensityStep:
    """Target intensity in force from ``year`` until the next step."""

    year: int
    intensity: Decimal  # gCO2e/MJ


@dataclass(frozen=True)
class RegulationParameters:
    """
    Regulatory constants governing CB calculation and route compliance.

    Guarantees:
        - ``steps`` is non-empty and sorted by year, with unique years.
        - ``energy_per_tonne_mj`` and every step intensity are positive.
        - ``checksum`` identifies the source content.
    """

    name: str
    version: str
    reference_intensity: Decimal
    energy_per_tonne_mj: Decimal
    steps: tuple[TargetIntensityStep, ...]
    checksum: str = ""

    def target_intensity(self, year: int) -> Decimal:
        """
        Target intensity for ``year``.

        The latest step whose year is <= ``year``; years before the first
        step resolve to the first step.
        """
        target = self.steps[0].intensity
        for step in self.steps:
            if step.year <= year:
                target = step.intensity
            else:
                break
        return target
