"""
Module: fueleu_kernel.models.route
Responsibility: ORM persistence for measured route performance.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - route_id is unique.
    - At most one baseline per year.  Enforced by RouteService.set_baseline,
      which clears the year's other baselines in the same flush.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fueleu_kernel.db.base import Base


class RouteModel(Base):
    """Persistent storage for one route's yearly telemetry."""

    __tablename__ = "routes"

    __table_args__ = (
        UniqueConstraint("route_id", name="uq_route_route_id"),
        Index("idx_route_year_baseline", "year", "is_baseline"),
    )

    route_id: Mapped[str] = mapped_column(String(50), nullable=False)
    vessel_type: Mapped[str] = mapped_column(String(50), nullable=False)
    fuel_type: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    ghg_intensity: Mapped[Decimal] = mapped_column(nullable=False)
    fuel_consumption: Mapped[Decimal] = mapped_column(nullable=False)
    distance: Mapped[Decimal] = mapped_column(nullable=False)
    total_emissions: Mapped[Decimal] = mapped_column(nullable=False)

    is_baseline: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Route {self.route_id}: {self.vessel_type}/{self.fuel_type} "
            f"{self.year} {self.ghg_intensity} gCO2e/MJ"
            f"{' baseline' if self.is_baseline else ''}>"
        )
