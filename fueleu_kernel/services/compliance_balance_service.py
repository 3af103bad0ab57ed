"""
ComplianceBalanceService -- persist computed compliance balances.

Invariants enforced:
    - One row per (ship_id, year).  upsert() updates the existing row in
      place, so recomputing a CB replaces it rather than adding a second one.
"""

from sqlalchemy import select

from fueleu_kernel.domain.compliance import ComplianceBalance
from fueleu_kernel.logging_config import get_logger
from fueleu_kernel.models.compliance import ShipComplianceModel
from fueleu_kernel.services.base import BaseService

logger = get_logger("services.compliance_balance")


class ComplianceBalanceService(BaseService[ShipComplianceModel]):
    """Write side of the compliance store."""

    def upsert(self, balance: ComplianceBalance) -> ComplianceBalance:
        model = self.session.scalars(
            select(ShipComplianceModel).where(
                ShipComplianceModel.ship_id == balance.ship_id,
                ShipComplianceModel.year == balance.year,
            )
        ).one_or_none()

        inserted = model is None
        if inserted:
            model = ShipComplianceModel(ship_id=balance.ship_id, year=balance.year)
            self.session.add(model)

        model.cb_gco2eq = balance.cb_gco2eq
        model.target_intensity = balance.target_intensity
        model.actual_intensity = balance.actual_intensity
        model.energy_in_scope = balance.energy_in_scope
        self.session.flush()

        logger.info("compliance_balance_upserted", extra={
            "ship_id": balance.ship_id,
            "year": balance.year,
            "cb_gco2eq": str(balance.cb_gco2eq),
            "inserted": inserted,
        })
        return balance
