"""
Compliance domain records -- routes, compliance balances, comparisons.

Architecture position:
    Kernel > Domain -- pure, immutable records.  No ORM, no I/O.

Sign convention:
    ``cb_gco2eq > 0`` is a surplus (actual intensity below target),
    ``cb_gco2eq < 0`` is a deficit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Route:
    """
    A ship-year's measured route performance.

    ``id`` is the storage identifier; ``route_id`` is the external route
    code (e.g. ``"R001"``), which also serves as the ship id when CB is
    derived from a route.
    """

    id: str
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: Decimal  # gCO2e/MJ
    fuel_consumption: Decimal  # tonnes
    distance: Decimal  # km
    total_emissions: Decimal  # tonnes
    is_baseline: bool = False


@dataclass(frozen=True, slots=True)
class ComplianceBalance:
    """
    Compliance balance of one ship for one year.

    Contract:
        Frozen record produced by ComplianceCalculator.  One per
        (ship_id, year); a recalculation replaces the stored value.
    Guarantees:
        - ``cb_gco2eq == (target_intensity - actual_intensity) * energy_in_scope``.
    """

    ship_id: str
    year: int
    cb_gco2eq: Decimal
    target_intensity: Decimal  # gCO2e/MJ
    actual_intensity: Decimal  # gCO2e/MJ
    energy_in_scope: Decimal  # MJ

    @property
    def is_surplus(self) -> bool:
        return self.cb_gco2eq > 0

    @property
    def is_deficit(self) -> bool:
        return self.cb_gco2eq < 0


@dataclass(frozen=True, slots=True)
class AdjustedComplianceBalance:
    """CB plus the banked surplus applied to the same ship-year so far."""

    balance: ComplianceBalance
    total_applied: Decimal

    @property
    def ship_id(self) -> str:
        return self.balance.ship_id

    @property
    def year(self) -> int:
        return self.balance.year

    @property
    def cb_gco2eq(self) -> Decimal:
        return self.balance.cb_gco2eq

    @property
    def adjusted_cb(self) -> Decimal:
        return self.balance.cb_gco2eq + self.total_applied


@dataclass(frozen=True, slots=True)
class RouteComparison:
    """Relative GHG-intensity deviation of ``comparison`` against ``baseline``."""

    route_id: str
    baseline: Route
    comparison: Route
    percent_diff: Decimal
    compliant: bool
