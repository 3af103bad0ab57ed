"""
Module: fueleu_kernel.models.compliance
Responsibility: ORM persistence for ship-year compliance balances.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per (ship_id, year); recalculation upserts in place.
    - Only the computed CB is stored.  The adjusted CB is derived at read
      time from bank_entries.applied_amount_gco2eq.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fueleu_kernel.db.base import Base


class ShipComplianceModel(Base):
    """Persistent storage for a computed compliance balance."""

    __tablename__ = "ship_compliance"

    __table_args__ = (
        UniqueConstraint("ship_id", "year", name="uq_ship_compliance_ship_year"),
    )

    ship_id: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    cb_gco2eq: Mapped[Decimal] = mapped_column(nullable=False)
    target_intensity: Mapped[Decimal] = mapped_column(nullable=False)
    actual_intensity: Mapped[Decimal] = mapped_column(nullable=False)
    energy_in_scope: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<ShipCompliance {self.ship_id}/{self.year}: cb={self.cb_gco2eq}>"
