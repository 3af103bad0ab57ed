"""
Module: fueleu_kernel.selectors.compliance_selector
Responsibility: Read computed compliance balances and derive adjusted balances.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The adjusted CB is never stored.  It is the stored CB plus the sum of
      applied amounts across the ship-year's bank entries, computed here at
      read time.
"""

from decimal import Decimal

from sqlalchemy import func, select

from fueleu_kernel.domain.compliance import (
    AdjustedComplianceBalance,
    ComplianceBalance,
)
from fueleu_kernel.models.bank_entry import BankEntryModel
from fueleu_kernel.models.compliance import ShipComplianceModel
from fueleu_kernel.selectors.base import BaseSelector


def balance_from_model(model: ShipComplianceModel) -> ComplianceBalance:
    return ComplianceBalance(
        ship_id=model.ship_id,
        year=model.year,
        cb_gco2eq=model.cb_gco2eq,
        target_intensity=model.target_intensity,
        actual_intensity=model.actual_intensity,
        energy_in_scope=model.energy_in_scope,
    )


class ComplianceSelector(BaseSelector[ShipComplianceModel]):
    """Compliance balance reads keyed by (ship_id, year)."""

    def _load(self, ship_id: str, year: int) -> ShipComplianceModel | None:
        return self.session.scalars(
            select(ShipComplianceModel).where(
                ShipComplianceModel.ship_id == ship_id,
                ShipComplianceModel.year == year,
            )
        ).one_or_none()

    def get(self, ship_id: str, year: int) -> ComplianceBalance | None:
        model = self._load(ship_id, year)
        return balance_from_model(model) if model is not None else None

    def get_adjusted(
        self, ship_id: str, year: int
    ) -> AdjustedComplianceBalance | None:
        balance = self.get(ship_id, year)
        if balance is None:
            return None

        applied = self.session.scalar(
            select(
                func.coalesce(func.sum(BankEntryModel.applied_amount_gco2eq), 0)
            ).where(
                BankEntryModel.ship_id == ship_id,
                BankEntryModel.year == year,
            )
        )
        return AdjustedComplianceBalance(
            balance=balance,
            total_applied=Decimal(str(applied)),
        )

    def list_by_year(self, year: int) -> list[ComplianceBalance]:
        rows = self.session.scalars(
            select(ShipComplianceModel)
            .where(ShipComplianceModel.year == year)
            .order_by(ShipComplianceModel.ship_id)
        ).all()
        return [balance_from_model(r) for r in rows]
