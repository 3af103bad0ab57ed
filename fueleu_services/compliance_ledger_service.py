"""
fueleu_services.compliance_ledger_service -- Caller-facing compliance ledger.

Responsibility:
    Orchestrate the compliance engines over persistent storage: compute and
    store CBs, bank surplus, apply banked surplus FIFO, form pools and
    compare routes against the baseline.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes ComplianceCalculator, BankingLedger, PoolAllocator and
    RouteComparator with the kernel selectors (reads) and kernel services
    (writes).  Holds a caller-owned Session and never commits; wrap calls in
    ``session_scope()`` (or commit yourself) to make them durable.

Invariants enforced:
    - The stored CB is the calculated CB.  The adjusted CB (stored CB plus
      banked surplus applied) is derived on read, and is the "current CB"
      used by deposit, apply and pooling.
    - Apply is checked against the available banked total before any FIFO
      consumption is written; no partial apply is ever flushed.
    - Bank entries are locked (SELECT ... FOR UPDATE) for the duration of an
      apply so concurrent applies serialize on PostgreSQL.
    - Only valid pools are persisted, header and members in one flush.

Failure modes:
    - ComplianceBalanceNotFoundError -- no CB computed for a ship-year.
    - RouteNotFoundError / BaselineNotFoundError / PoolNotFoundError.
    - InvalidAmountError -- non-positive deposit or apply amount, or a
      deposit with no positive CB to bank.
    - InsufficientBankedError -- apply exceeds the available banked surplus.
    - InvalidPoolError -- pool sum negative or an exit condition violated.

Audit relevance:
    Every operation runs inside ``LogContext.bind`` so the engine traces and
    kernel write logs it produces carry the ship or pool they concern.

Usage:
    from fueleu_kernel.db import session_scope
    from fueleu_services import ComplianceLedgerService

    with session_scope() as session:
        ledger = ComplianceLedgerService(session)
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        ledger.deposit("S1", 2025)
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.orm import Session

from fueleu_config import get_active_regulation
from fueleu_config.schema import RegulationParameters
from fueleu_engines.banking import BankingLedger
from fueleu_engines.comparison import RouteComparator
from fueleu_engines.compliance import ComplianceCalculator
from fueleu_engines.pooling import PoolAllocator
from fueleu_kernel.domain.banking import BankEntry, BankingResult
from fueleu_kernel.domain.clock import Clock, SystemClock
from fueleu_kernel.domain.compliance import (
    AdjustedComplianceBalance,
    ComplianceBalance,
    Route,
    RouteComparison,
)
from fueleu_kernel.domain.identifiers import IdGenerator, uuid_generator
from fueleu_kernel.domain.pooling import PoolResult
from fueleu_kernel.domain.values import ZERO, Numeric, quantize_amount, to_decimal
from fueleu_kernel.exceptions import (
    BaselineNotFoundError,
    ComplianceBalanceNotFoundError,
    InvalidAmountError,
    InvalidPoolError,
    PoolNotFoundError,
    RouteNotFoundError,
)
from fueleu_kernel.logging_config import LogContext, get_logger
from fueleu_kernel.selectors.banking_selector import BankingSelector
from fueleu_kernel.selectors.compliance_selector import ComplianceSelector
from fueleu_kernel.selectors.pool_selector import PoolSelector
from fueleu_kernel.selectors.route_selector import RouteSelector
from fueleu_kernel.services.bank_ledger_service import BankLedgerService
from fueleu_kernel.services.compliance_balance_service import (
    ComplianceBalanceService,
)
from fueleu_kernel.services.pool_service import PoolService
from fueleu_kernel.services.route_service import RouteService

logger = get_logger("services.compliance_ledger")


class ComplianceLedgerService:
    """
    Compliance balance, banking and pooling for ship-years.

    Contract:
        Receives a Session via constructor injection; regulation parameters,
        identifier generator and clock are injectable for deterministic
        tests.  When ``regulation`` is omitted the active regulation is
        loaded through ``fueleu_config.get_active_regulation()``.
    Non-goals:
        - Does not commit.  Transaction boundaries belong to the caller.
        - Does not expire banked surplus across years.
    """

    def __init__(
        self,
        session: Session,
        regulation: RegulationParameters | None = None,
        id_generator: IdGenerator = uuid_generator,
        clock: Clock | None = None,
    ):
        self.session = session
        self._regulation = regulation or get_active_regulation()
        self._clock = clock or SystemClock()

        self._calculator = ComplianceCalculator(self._regulation)
        self._banking = BankingLedger(id_generator=id_generator, clock=self._clock)
        self._pooling = PoolAllocator(id_generator=id_generator)
        self._comparator = RouteComparator(self._regulation)

        self._routes = RouteSelector(session)
        self._compliance = ComplianceSelector(session)
        self._bank = BankingSelector(session)
        self._pools = PoolSelector(session)

        self._route_writer = RouteService(session)
        self._balance_writer = ComplianceBalanceService(session)
        self._bank_writer = BankLedgerService(session)
        self._pool_writer = PoolService(session)

    @property
    def regulation(self) -> RegulationParameters:
        return self._regulation

    # =========================================================================
    # Compliance balance
    # =========================================================================

    def calculate_cb(
        self,
        ship_id: str,
        year: int,
        intensity: Numeric,
        fuel_consumption: Numeric,
    ) -> ComplianceBalance:
        """Compute the ship-year's CB and store it, replacing any earlier one."""
        with LogContext.bind(ship_id=ship_id):
            balance = self._calculator.calculate(
                ship_id=ship_id,
                year=year,
                actual_intensity=intensity,
                fuel_consumption=fuel_consumption,
            )
            return self._balance_writer.upsert(balance)

    def calculate_cb_for_route(self, route_id: str, year: int) -> ComplianceBalance:
        """
        Compute a CB from route telemetry.

        The route code doubles as the ship id.  The route's GHG intensity
        and fuel consumption are used; ``year`` selects the target.

        Raises:
            RouteNotFoundError: If no route has ``route_id``.
        """
        route = self._routes.get_by_route_id(route_id)
        if route is None:
            raise RouteNotFoundError(route_id)
        return self.calculate_cb(
            route.route_id, year, route.ghg_intensity, route.fuel_consumption
        )

    def get_cb(self, ship_id: str, year: int) -> ComplianceBalance:
        balance = self._compliance.get(ship_id, year)
        if balance is None:
            raise ComplianceBalanceNotFoundError(ship_id, year)
        return balance

    def get_adjusted_cb(self, ship_id: str, year: int) -> AdjustedComplianceBalance:
        """Stored CB plus the banked surplus applied to it so far."""
        adjusted = self._compliance.get_adjusted(ship_id, year)
        if adjusted is None:
            raise ComplianceBalanceNotFoundError(ship_id, year)
        return adjusted

    # =========================================================================
    # Banking
    # =========================================================================

    def deposit(
        self,
        ship_id: str,
        year: int,
        amount: Numeric | None = None,
    ) -> BankEntry:
        """
        Bank surplus CB as a new ledger entry.

        Args:
            amount: Amount to bank.  Defaults to the full current CB.

        Raises:
            ComplianceBalanceNotFoundError: If no CB exists for the ship-year.
            InvalidAmountError: If the current CB is not a surplus, or the
                amount given is not strictly positive.
        """
        with LogContext.bind(ship_id=ship_id):
            current = self.get_adjusted_cb(ship_id, year).adjusted_cb
            if current <= ZERO:
                logger.warning("deposit_without_surplus", extra={
                    "ship_id": ship_id,
                    "year": year,
                    "current_cb": str(current),
                })
                raise InvalidAmountError(current, "deposit")

            to_bank = quantize_amount(
                current if amount is None else to_decimal(amount, "amount")
            )
            entry = self._banking.deposit(ship_id=ship_id, year=year, cb_amount=to_bank)
            return self._bank_writer.append(entry)

    def apply_banked(self, ship_id: str, year: int, amount: Numeric) -> BankingResult:
        """
        Apply banked surplus to the ship-year's CB, oldest deposits first.

        Raises:
            ComplianceBalanceNotFoundError: If no CB exists for the ship-year.
            InvalidAmountError: If ``amount`` is not strictly positive.
            InsufficientBankedError: If ``amount`` exceeds what is available.
        """
        with LogContext.bind(ship_id=ship_id):
            current = self.get_adjusted_cb(ship_id, year).adjusted_cb
            entries = self._bank.list_entries(ship_id, year, for_update=True)

            result = self._banking.apply(
                current_cb=current,
                available_banked=BankingLedger.available(entries),
                amount_to_apply=quantize_amount(to_decimal(amount, "amount")),
            )
            consumption = self._banking.consume_fifo(entries=entries, amount=result.applied)
            self._bank_writer.record_consumption(consumption)

            logger.info("banked_surplus_applied", extra={
                "ship_id": ship_id,
                "year": year,
                "cb_before": str(result.cb_before),
                "applied": str(result.applied),
                "cb_after": str(result.cb_after),
            })
            return result

    def list_bank_records(self, ship_id: str, year: int) -> list[BankEntry]:
        return self._bank.list_entries(ship_id, year)

    def available_banked(self, ship_id: str, year: int) -> Decimal:
        return self._bank.total_available(ship_id, year)

    # =========================================================================
    # Pooling
    # =========================================================================

    def create_pool(self, year: int, ship_ids: Sequence[str]) -> PoolResult:
        """
        Pool the current CBs of ``ship_ids`` for ``year``.

        Raises:
            ValueError: If ``ship_ids`` is empty or lists a ship more than once.
            ComplianceBalanceNotFoundError: If any ship has no CB for ``year``.
            InvalidPoolError: If the pool sum is negative or an exit
                condition would be violated.  Nothing is persisted.
        """
        if not ship_ids:
            raise ValueError("Pool request must name at least one ship")
        if len(set(ship_ids)) != len(ship_ids):
            raise ValueError(f"Duplicate ship ids in pool request: {list(ship_ids)}")

        member_cbs = {
            ship_id: self.get_adjusted_cb(ship_id, year).adjusted_cb
            for ship_id in ship_ids
        }

        result = self._pooling.create_pool(year=year, member_cbs=member_cbs)
        if not result.valid:
            raise InvalidPoolError(year, result.pool_sum, result.reason or "pool not valid")

        with LogContext.bind(pool_id=result.pool_id):
            self._pool_writer.record_pool(result, created_at=self._clock.now())
        return result

    def get_pool(self, pool_id: str) -> PoolResult:
        pool = self._pools.get(pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return self._pool_result(pool.pool_id, pool.year)

    def list_pools(self, year: int) -> list[PoolResult]:
        return [self._pool_result(p.pool_id, p.year) for p in self._pools.list_by_year(year)]

    def _pool_result(self, pool_id: str, year: int) -> PoolResult:
        members = tuple(self._pools.members(pool_id))
        return PoolResult(
            pool_id=pool_id,
            year=year,
            members=members,
            pool_sum=sum((m.cb_before for m in members), ZERO),
            valid=True,
        )

    # =========================================================================
    # Routes
    # =========================================================================

    def list_routes(self) -> list[Route]:
        return self._routes.list_all()

    def set_baseline(self, route_id: str) -> Route:
        return self._route_writer.set_baseline(route_id)

    def compare_routes(self) -> list[RouteComparison]:
        """
        Compare every non-baseline route against the current baseline.

        Raises:
            BaselineNotFoundError: If no route is marked as baseline.
        """
        baseline = self._routes.find_baseline()
        if baseline is None:
            raise BaselineNotFoundError()
        routes = [r for r in self._routes.list_all() if not r.is_baseline]
        return self._comparator.compare_all(baseline, routes)
