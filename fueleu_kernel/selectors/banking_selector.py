"""
Module: fueleu_kernel.selectors.banking_selector
Responsibility: Read the banking ledger of a ship-year -- entries in FIFO
    order and the banked / applied / available totals.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - list_entries returns entries oldest-first by (created_at, ledger_seq).
      This is the order BankingLedger.consume_fifo walks them in.
    - Totals are computed from rows at query time; no stored balances.
"""

from decimal import Decimal

from sqlalchemy import func, select

from fueleu_kernel.domain.banking import BankEntry
from fueleu_kernel.models.bank_entry import BankEntryModel
from fueleu_kernel.selectors.base import BaseSelector


def entry_from_model(model: BankEntryModel) -> BankEntry:
    return BankEntry(
        entry_id=model.id,
        ship_id=model.ship_id,
        year=model.year,
        banked_amount=model.amount_gco2eq,
        applied_amount=model.applied_amount_gco2eq,
        created_at=model.created_at,
    )


class BankingSelector(BaseSelector[BankEntryModel]):
    """Banking ledger reads keyed by (ship_id, year)."""

    def _entries_query(self, ship_id: str, year: int):
        return (
            select(BankEntryModel)
            .where(
                BankEntryModel.ship_id == ship_id,
                BankEntryModel.year == year,
            )
            .order_by(BankEntryModel.created_at, BankEntryModel.ledger_seq)
        )

    def list_entries(
        self,
        ship_id: str,
        year: int,
        for_update: bool = False,
    ) -> list[BankEntry]:
        """
        Return the ship-year's entries oldest-first.

        Args:
            for_update: Lock the rows (SELECT ... FOR UPDATE) for the rest of
                the caller's transaction.  Ignored by SQLite.
        """
        query = self._entries_query(ship_id, year)
        if for_update:
            query = query.with_for_update()
        return [entry_from_model(m) for m in self.session.scalars(query).all()]

    def _sum(self, column, ship_id: str, year: int) -> Decimal:
        total = self.session.scalar(
            select(func.coalesce(func.sum(column), 0)).where(
                BankEntryModel.ship_id == ship_id,
                BankEntryModel.year == year,
            )
        )
        return Decimal(str(total))

    def total_banked(self, ship_id: str, year: int) -> Decimal:
        return self._sum(BankEntryModel.amount_gco2eq, ship_id, year)

    def total_applied(self, ship_id: str, year: int) -> Decimal:
        return self._sum(BankEntryModel.applied_amount_gco2eq, ship_id, year)

    def total_available(self, ship_id: str, year: int) -> Decimal:
        """Banked minus applied across all of the ship-year's entries."""
        return self._sum(
            BankEntryModel.amount_gco2eq - BankEntryModel.applied_amount_gco2eq,
            ship_id,
            year,
        )

    def next_ledger_seq(self, ship_id: str, year: int) -> int:
        current = self.session.scalar(
            select(func.coalesce(func.max(BankEntryModel.ledger_seq), 0)).where(
                BankEntryModel.ship_id == ship_id,
                BankEntryModel.year == year,
            )
        )
        return int(current) + 1
