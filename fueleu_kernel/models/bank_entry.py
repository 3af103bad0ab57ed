"""
Module: fueleu_kernel.models.bank_entry
Responsibility: ORM persistence for banked surplus.  Each row is one deposit.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: deposits are inserted, never merged.  The only column
      that changes after insert is applied_amount_gco2eq, and it only grows.
    - applied_amount_gco2eq <= amount_gco2eq (CHECK constraint).
    - FIFO ordering: (ship_id, year, created_at, ledger_seq) index.
      ledger_seq breaks ties between deposits sharing a timestamp.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fueleu_kernel.db.base import Base


class BankEntryModel(Base):
    """Persistent storage for one bank deposit."""

    __tablename__ = "bank_entries"

    __table_args__ = (
        Index("idx_bank_entry_fifo", "ship_id", "year", "created_at", "ledger_seq"),
        CheckConstraint("amount_gco2eq > 0", name="ck_bank_entry_positive"),
        CheckConstraint(
            "applied_amount_gco2eq >= 0 AND applied_amount_gco2eq <= amount_gco2eq",
            name="ck_bank_entry_applied_bounds",
        ),
    )

    ship_id: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Position of the deposit within its ship-year ledger, starting at 1
    ledger_seq: Mapped[int] = mapped_column(Integer, nullable=False)

    amount_gco2eq: Mapped[Decimal] = mapped_column(nullable=False)
    applied_amount_gco2eq: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<BankEntry {self.id}: {self.ship_id}/{self.year} #{self.ledger_seq} "
            f"banked={self.amount_gco2eq} applied={self.applied_amount_gco2eq}>"
        )
