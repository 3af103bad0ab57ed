"""
Banking domain records -- bank entries and the results of applying them.

Architecture position:
    Kernel > Domain -- pure, immutable records.  No ORM, no I/O.

Invariants enforced:
    - banked_amount > 0 for every entry.
    - 0 <= applied_amount <= banked_amount.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from fueleu_kernel.domain.values import ZERO


@dataclass(frozen=True, slots=True)
class BankEntry:
    """
    One deposit of surplus CB into the bank.

    Contract:
        Each deposit is its own line; entries for the same ship-year are
        never merged.  Only ``applied_amount`` changes over the entry's
        lifetime, and only upwards -- expressed here by producing a new
        record via ``with_applied``.
    Guarantees:
        - ``banked_amount > 0``.
        - ``0 <= applied_amount <= banked_amount``.
    """

    entry_id: str
    ship_id: str
    year: int
    banked_amount: Decimal
    applied_amount: Decimal
    created_at: datetime

    def __post_init__(self) -> None:
        if self.banked_amount <= ZERO:
            raise ValueError(
                f"Banked amount must be positive, got {self.banked_amount}"
            )
        if self.applied_amount < ZERO:
            raise ValueError(
                f"Applied amount cannot be negative, got {self.applied_amount}"
            )
        if self.applied_amount > self.banked_amount:
            raise ValueError(
                f"Applied amount {self.applied_amount} exceeds banked "
                f"amount {self.banked_amount} on entry {self.entry_id}"
            )

    @property
    def remaining(self) -> Decimal:
        """Banked surplus on this entry not yet applied."""
        return self.banked_amount - self.applied_amount

    @property
    def is_exhausted(self) -> bool:
        return self.remaining == ZERO

    def with_applied(self, delta: Decimal) -> BankEntry:
        """Return a copy with ``delta`` added to the applied amount."""
        return replace(self, applied_amount=self.applied_amount + delta)


@dataclass(frozen=True, slots=True)
class BankingResult:
    """Outcome of applying banked surplus to a ship-year's CB."""

    cb_before: Decimal
    applied: Decimal
    cb_after: Decimal


@dataclass(frozen=True, slots=True)
class BankApplication:
    """Amount drawn from one bank entry during a FIFO walk."""

    entry_id: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class FifoConsumption:
    """
    Result of consuming banked surplus oldest-first.

    ``entries`` holds every input entry (oldest first) with its updated
    applied amount; ``applications`` lists only the entries actually drawn
    on, in the order they were drawn.
    """

    requested: Decimal
    entries: tuple[BankEntry, ...]
    applications: tuple[BankApplication, ...]

    @property
    def total_applied(self) -> Decimal:
        return sum((a.amount for a in self.applications), ZERO)
