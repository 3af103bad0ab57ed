"""
Module: fueleu_engines.compliance
Responsibility:
    Compute a ship-year's compliance balance (CB) from its actual GHG
    intensity and fuel consumption.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fueleu_kernel/domain and fueleu_config.schema.

Invariants enforced:
    - energy_in_scope == fuel_consumption * energy_per_tonne_mj.
    - cb_gco2eq == (target_intensity - actual_intensity) * energy_in_scope.
    - Decimal-only arithmetic; floats are converted through ``str``.
    - Idempotent: identical inputs always produce an identical balance.

Failure modes:
    - ValueError from ``to_decimal`` on booleans, NaN or infinite inputs.

Audit relevance:
    The resulting balance records the target intensity and energy figure
    it was derived from, so a stored CB can be re-derived on inspection.

Usage:
    from fueleu_config import get_active_regulation
    from fueleu_engines.compliance import ComplianceCalculator

    calculator = ComplianceCalculator(get_active_regulation())
    cb = calculator.calculate(
        ship_id="S1", year=2024, actual_intensity="85.0", fuel_consumption="5000",
    )
"""

from __future__ import annotations

from fueleu_config.schema import RegulationParameters
from fueleu_engines.tracer import traced_engine
from fueleu_kernel.domain.compliance import ComplianceBalance
from fueleu_kernel.domain.values import Numeric, to_decimal
from fueleu_kernel.logging_config import get_logger

logger = get_logger("engines.compliance")


class ComplianceCalculator:
    """
    Calculates compliance balances against the regulatory target.

    Contract:
        Stateless apart from the injected regulation parameters.
    Guarantees:
        - A positive CB is a surplus, a negative CB a deficit.
    """

    def __init__(self, regulation: RegulationParameters):
        self._regulation = regulation

    @property
    def regulation(self) -> RegulationParameters:
        return self._regulation

    def target_intensity(self, year: int):
        """Target GHG intensity (gCO2e/MJ) governing ``year``."""
        return self._regulation.target_intensity(year)

    @traced_engine(
        "compliance", "1.0",
        fingerprint_fields=("ship_id", "year", "actual_intensity", "fuel_consumption"),
    )
    def calculate(
        self,
        ship_id: str,
        year: int,
        actual_intensity: Numeric,
        fuel_consumption: Numeric,
    ) -> ComplianceBalance:
        """
        Compute the CB for one ship-year.

        Args:
            ship_id: Ship the balance belongs to.
            year: Reporting year; selects the target intensity.
            actual_intensity: Measured GHG intensity in gCO2e/MJ.
            fuel_consumption: Fuel consumed in tonnes.

        Returns:
            ComplianceBalance with the CB in gCO2eq.
        """
        actual = to_decimal(actual_intensity, "actual_intensity")
        fuel = to_decimal(fuel_consumption, "fuel_consumption")

        target = self._regulation.target_intensity(year)
        energy = fuel * self._regulation.energy_per_tonne_mj
        cb = (target - actual) * energy

        logger.info("compliance_balance_calculated", extra={
            "ship_id": ship_id,
            "year": year,
            "target_intensity": str(target),
            "actual_intensity": str(actual),
            "energy_in_scope": str(energy),
            "cb_gco2eq": str(cb),
        })

        return ComplianceBalance(
            ship_id=ship_id,
            year=year,
            cb_gco2eq=cb,
            target_intensity=target,
            actual_intensity=actual,
            energy_in_scope=energy,
        )
