"""
BankLedgerService -- append deposits and record FIFO consumption.

Invariants enforced:
    - Append-only: every deposit is a new row with its own ledger_seq.
    - Applied amounts only grow, and never past the banked amount.  The
      FifoConsumption handed to record_consumption was produced by
      BankingLedger.consume_fifo after the availability check, so each
      delta fits its entry's remaining capacity; the CHECK constraint on
      bank_entries backs this up at the database level.

Failure modes:
    - ValueError if a consumption refers to an entry id that is not stored.
"""

from fueleu_kernel.domain.banking import BankEntry, FifoConsumption
from fueleu_kernel.logging_config import get_logger
from fueleu_kernel.models.bank_entry import BankEntryModel
from fueleu_kernel.selectors.banking_selector import BankingSelector
from fueleu_kernel.services.base import BaseService

logger = get_logger("services.bank_ledger")


class BankLedgerService(BaseService[BankEntryModel]):
    """Write side of the banking ledger."""

    def append(self, entry: BankEntry) -> BankEntry:
        seq = BankingSelector(self.session).next_ledger_seq(entry.ship_id, entry.year)
        self.session.add(
            BankEntryModel(
                id=entry.entry_id,
                ship_id=entry.ship_id,
                year=entry.year,
                ledger_seq=seq,
                amount_gco2eq=entry.banked_amount,
                applied_amount_gco2eq=entry.applied_amount,
                created_at=entry.created_at,
            )
        )
        self.session.flush()

        logger.info("bank_entry_appended", extra={
            "entry_id": entry.entry_id,
            "ship_id": entry.ship_id,
            "year": entry.year,
            "ledger_seq": seq,
            "banked_amount": str(entry.banked_amount),
        })
        return entry

    def record_consumption(self, consumption: FifoConsumption) -> None:
        for application in consumption.applications:
            model = self.session.get(BankEntryModel, application.entry_id)
            if model is None:
                raise ValueError(f"Bank entry not found: {application.entry_id}")
            model.applied_amount_gco2eq = (
                model.applied_amount_gco2eq + application.amount
            )
            logger.debug("bank_entry_applied", extra={
                "entry_id": application.entry_id,
                "amount": str(application.amount),
                "applied_total": str(model.applied_amount_gco2eq),
            })
        self.session.flush()

        logger.info("bank_consumption_recorded", extra={
            "requested": str(consumption.requested),
            "entries_touched": len(consumption.applications),
        })
