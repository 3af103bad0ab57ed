"""
Module: fueleu_engines.banking
Responsibility:
    Banking of surplus compliance balance: create bank entries, apply
    banked surplus against a ship-year's CB, and consume bank entries
    oldest-first.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Identifiers and timestamps come from the injected IdGenerator and Clock.

Invariants enforced:
    - A deposit amount is strictly positive; every deposit is its own entry.
    - 0 <= applied_amount <= banked_amount on every entry produced.
    - Apply never exceeds the available banked surplus.
    - FIFO consumption partitions the requested amount across entries in
      creation order; the sum of the per-entry deltas equals the request.
    - Inputs are never mutated; updated entries are new records.

Failure modes:
    - InvalidAmountError for a non-positive deposit, apply or consume amount.
    - InsufficientBankedError when the request exceeds what is available.

Audit relevance:
    The per-entry applications returned by ``consume_fifo`` are exactly the
    deltas persisted to the bank ledger, so every applied gram is traceable
    to the deposit it was drawn from.

Usage:
    from fueleu_engines.banking import BankingLedger

    ledger = BankingLedger(id_generator=uuid_generator, clock=SystemClock())
    entry = ledger.deposit(ship_id="S1", year=2025, cb_amount="1000")
    result = ledger.apply(current_cb="-500", available_banked="1000", amount_to_apply="300")
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from fueleu_engines.tracer import traced_engine
from fueleu_kernel.domain.banking import (
    BankApplication,
    BankEntry,
    BankingResult,
    FifoConsumption,
)
from fueleu_kernel.domain.clock import Clock, SystemClock
from fueleu_kernel.domain.identifiers import IdGenerator, uuid_generator
from fueleu_kernel.domain.values import ZERO, Numeric, to_decimal
from fueleu_kernel.exceptions import InsufficientBankedError, InvalidAmountError
from fueleu_kernel.logging_config import get_logger

logger = get_logger("engines.banking")


class BankingLedger:
    """
    Pure operations over a ship-year's bank entries.

    Contract:
        Holds only its injected id generator and clock; carries no ledger
        state between calls.
    """

    def __init__(
        self,
        id_generator: IdGenerator = uuid_generator,
        clock: Clock | None = None,
    ):
        self._id_generator = id_generator
        self._clock = clock or SystemClock()

    @traced_engine("banking.deposit", "1.0", fingerprint_fields=("ship_id", "year", "cb_amount"))
    def deposit(self, ship_id: str, year: int, cb_amount: Numeric) -> BankEntry:
        """
        Bank a positive CB as a new ledger entry.

        Raises:
            InvalidAmountError: If ``cb_amount`` is not strictly positive.
        """
        amount = to_decimal(cb_amount, "cb_amount")
        if amount <= ZERO:
            logger.warning("bank_deposit_rejected", extra={
                "ship_id": ship_id,
                "year": year,
                "amount": str(amount),
            })
            raise InvalidAmountError(amount, "deposit")

        entry = BankEntry(
            entry_id=self._id_generator(),
            ship_id=ship_id,
            year=year,
            banked_amount=amount,
            applied_amount=ZERO,
            created_at=self._clock.now(),
        )

        logger.info("bank_entry_created", extra={
            "entry_id": entry.entry_id,
            "ship_id": ship_id,
            "year": year,
            "banked_amount": str(amount),
        })
        return entry

    @traced_engine(
        "banking.apply", "1.0",
        fingerprint_fields=("current_cb", "available_banked", "amount_to_apply"),
    )
    def apply(
        self,
        current_cb: Numeric,
        available_banked: Numeric,
        amount_to_apply: Numeric,
    ) -> BankingResult:
        """
        Raise ``current_cb`` by ``amount_to_apply`` of banked surplus.

        Raises:
            InvalidAmountError: If ``amount_to_apply`` is not strictly positive.
            InsufficientBankedError: If it exceeds ``available_banked``.
        """
        cb_before = to_decimal(current_cb, "current_cb")
        available = to_decimal(available_banked, "available_banked")
        amount = to_decimal(amount_to_apply, "amount_to_apply")

        if amount <= ZERO:
            raise InvalidAmountError(amount, "apply")
        if amount > available:
            logger.warning("bank_apply_insufficient", extra={
                "requested": str(amount),
                "available": str(available),
            })
            raise InsufficientBankedError(amount, available)

        return BankingResult(
            cb_before=cb_before,
            applied=amount,
            cb_after=cb_before + amount,
        )

    @staticmethod
    def available(entries: Iterable[BankEntry]) -> Decimal:
        """Total banked surplus not yet applied across ``entries``."""
        return sum((e.remaining for e in entries), ZERO)

    @traced_engine("banking.consume_fifo", "1.0", fingerprint_fields=("amount",))
    def consume_fifo(
        self,
        entries: Sequence[BankEntry],
        amount: Numeric,
    ) -> FifoConsumption:
        """
        Draw ``amount`` from ``entries`` oldest-first.

        Entries are ordered by ``created_at``; the sort is stable, so entries
        sharing a timestamp keep the order they were given in.

        Returns:
            FifoConsumption holding every entry (oldest first, applied
            amounts updated) and the non-zero per-entry deltas.

        Raises:
            InvalidAmountError: If ``amount`` is not strictly positive.
            InsufficientBankedError: If ``amount`` exceeds the total remaining.
        """
        requested = to_decimal(amount, "amount")
        if requested <= ZERO:
            raise InvalidAmountError(requested, "consume")

        ordered = sorted(entries, key=lambda e: e.created_at)
        available = self.available(ordered)
        if requested > available:
            raise InsufficientBankedError(requested, available)

        remaining = requested
        updated: list[BankEntry] = []
        applications: list[BankApplication] = []

        for entry in ordered:
            take = min(remaining, entry.remaining)
            if take > ZERO:
                updated.append(entry.with_applied(take))
                applications.append(BankApplication(entry_id=entry.entry_id, amount=take))
                remaining -= take
            else:
                updated.append(entry)

        logger.info("bank_fifo_consumed", extra={
            "requested": str(requested),
            "entries_drawn": len(applications),
            "entries_total": len(ordered),
        })

        return FifoConsumption(
            requested=requested,
            entries=tuple(updated),
            applications=tuple(applications),
        )
