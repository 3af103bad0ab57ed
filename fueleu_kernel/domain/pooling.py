"""
Pooling domain records -- pools, their members, and allocation results.

Architecture position:
    Kernel > Domain -- pure, immutable records.  No ORM, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fueleu_kernel.domain.values import ZERO


@dataclass(frozen=True, slots=True)
class Pool:
    """Pool header: a group of ship CBs redistributed for one year."""

    pool_id: str
    year: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PoolMember:
    """A ship's CB before and after the pool's redistribution."""

    pool_id: str
    ship_id: str
    cb_before: Decimal
    cb_after: Decimal

    @property
    def transferred(self) -> Decimal:
        """Net CB received (positive) or given up (negative)."""
        return self.cb_after - self.cb_before


@dataclass(frozen=True, slots=True)
class PoolResult:
    """
    Outcome of a pool allocation.

    Contract:
        When ``valid`` is False, ``pool_id`` is None and ``members`` is
        empty -- nothing may be persisted.
    Guarantees:
        - ``pool_sum`` equals the sum of the input CBs, valid or not.
        - For valid results, sum(cb_before) == sum(cb_after).
    """

    pool_id: str | None
    year: int
    members: tuple[PoolMember, ...]
    pool_sum: Decimal
    valid: bool
    reason: str | None = None

    @property
    def total_before(self) -> Decimal:
        return sum((m.cb_before for m in self.members), ZERO)

    @property
    def total_after(self) -> Decimal:
        return sum((m.cb_after for m in self.members), ZERO)

    def member(self, ship_id: str) -> PoolMember:
        for m in self.members:
            if m.ship_id == ship_id:
                return m
        raise KeyError(ship_id)
