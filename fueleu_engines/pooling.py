"""
Module: fueleu_engines.pooling
Responsibility:
    Form a compliance pool: redistribute surplus CB from surplus members to
    deficit members of the same year and validate the outcome.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The pool identifier comes from the injected IdGenerator.

Invariants enforced:
    - pool_sum == sum of the input CBs, whether or not the pool is valid.
    - A pool with a negative sum is rejected before any transfer.
    - Valid pools conserve CB: sum(cb_before) == sum(cb_after).
    - Exit conditions, checked as a separate pass over every member:
        * a deficit member never ends lower than it started;
        * a surplus member never ends negative.
    - Members with zero CB neither give nor receive.

Failure modes:
    - None raised.  Rejection is reported as ``valid=False`` with
      ``pool_id=None``, no members and a ``reason``; callers decide whether
      that is an error.
    - ValueError from ``to_decimal`` on non-numeric CBs.

Audit relevance:
    Each member's cb_before / cb_after pair is persisted verbatim, so the
    redistribution is reconstructible from the stored pool.

Usage:
    from fueleu_engines.pooling import PoolAllocator

    allocator = PoolAllocator(id_generator=uuid_generator)
    result = allocator.create_pool(
        year=2025, member_cbs={"S1": Decimal("1000"), "S2": Decimal("-500")},
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from fueleu_engines.tracer import traced_engine
from fueleu_kernel.domain.identifiers import IdGenerator, uuid_generator
from fueleu_kernel.domain.pooling import PoolMember, PoolResult
from fueleu_kernel.domain.values import ZERO, Numeric, to_decimal
from fueleu_kernel.logging_config import get_logger

logger = get_logger("engines.pooling")

REASON_NEGATIVE_SUM = "negative_pool_sum"
REASON_EXIT_CONDITION = "exit_condition_violated"


class PoolAllocator:
    """
    Greedy surplus-to-deficit allocation for a single year.

    Ordering:
        Members are sorted once by CB descending.  The sort is stable, so
        members with equal CB keep the insertion order of ``member_cbs``.
        The largest surplus funds deficits first, and the largest deficit
        (the most negative CB) is filled last.
    """

    def __init__(self, id_generator: IdGenerator = uuid_generator):
        self._id_generator = id_generator

    @traced_engine("pooling", "1.0", fingerprint_fields=("year", "member_cbs"))
    def create_pool(
        self,
        year: int,
        member_cbs: Mapping[str, Numeric],
    ) -> PoolResult:
        """
        Allocate surplus across ``member_cbs`` and validate the result.

        Args:
            year: Compliance year shared by every member.
            member_cbs: Ship id -> current (adjusted) CB, in caller order.

        Returns:
            PoolResult; on success one PoolMember per ship, in input order.
        """
        original = {
            ship_id: to_decimal(cb, f"cb[{ship_id}]")
            for ship_id, cb in member_cbs.items()
        }
        pool_sum = sum(original.values(), ZERO)

        logger.info("pool_allocation_started", extra={
            "year": year,
            "member_count": len(original),
            "pool_sum": str(pool_sum),
        })

        if pool_sum < ZERO:
            logger.warning("pool_rejected", extra={
                "year": year,
                "pool_sum": str(pool_sum),
                "reason": REASON_NEGATIVE_SUM,
            })
            return self._rejected(year, pool_sum, REASON_NEGATIVE_SUM)

        final = self._allocate(original)

        violations = self._exit_violations(original, final)
        if violations:
            logger.warning("pool_rejected", extra={
                "year": year,
                "pool_sum": str(pool_sum),
                "reason": REASON_EXIT_CONDITION,
                "violating_ships": violations,
            })
            return self._rejected(year, pool_sum, REASON_EXIT_CONDITION)

        pool_id = self._id_generator()
        members = tuple(
            PoolMember(
                pool_id=pool_id,
                ship_id=ship_id,
                cb_before=original[ship_id],
                cb_after=final[ship_id],
            )
            for ship_id in original
        )

        logger.info("pool_allocation_completed", extra={
            "pool_id": pool_id,
            "year": year,
            "member_count": len(members),
            "pool_sum": str(pool_sum),
        })

        return PoolResult(
            pool_id=pool_id,
            year=year,
            members=members,
            pool_sum=pool_sum,
            valid=True,
        )

    @staticmethod
    def _allocate(original: Mapping[str, Decimal]) -> dict[str, Decimal]:
        ordered = sorted(original.items(), key=lambda item: item[1], reverse=True)
        surplus = [[ship_id, cb] for ship_id, cb in ordered if cb > ZERO]
        deficit = [[ship_id, -cb] for ship_id, cb in ordered if cb < ZERO]

        final = dict(original)
        s = 0
        d = 0
        while s < len(surplus) and d < len(deficit):
            donor, available = surplus[s]
            receiver, needed = deficit[d]
            transfer = min(available, needed)

            final[donor] -= transfer
            final[receiver] += transfer
            surplus[s][1] = available - transfer
            deficit[d][1] = needed - transfer

            if surplus[s][1] == ZERO:
                s += 1
            if deficit[d][1] == ZERO:
                d += 1
        return final

    @staticmethod
    def _exit_violations(
        original: Mapping[str, Decimal],
        final: Mapping[str, Decimal],
    ) -> list[str]:
        violations = []
        for ship_id, before in original.items():
            after = final[ship_id]
            if before < ZERO and after < before:
                violations.append(ship_id)
            elif before > ZERO and after < ZERO:
                violations.append(ship_id)
        return violations

    @staticmethod
    def _rejected(year: int, pool_sum: Decimal, reason: str) -> PoolResult:
        return PoolResult(
            pool_id=None,
            year=year,
            members=(),
            pool_sum=pool_sum,
            valid=False,
            reason=reason,
        )
