"""
Tests for the read side: route, compliance, banking and pool selectors.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fueleu_kernel.domain.banking import BankApplication, BankEntry, FifoConsumption
from fueleu_kernel.domain.compliance import ComplianceBalance
from fueleu_kernel.domain.pooling import PoolMember, PoolResult
from fueleu_kernel.exceptions import InvalidPoolError
from fueleu_kernel.selectors.banking_selector import BankingSelector
from fueleu_kernel.selectors.compliance_selector import ComplianceSelector
from fueleu_kernel.selectors.pool_selector import PoolSelector
from fueleu_kernel.selectors.route_selector import RouteSelector
from fueleu_kernel.services.bank_ledger_service import BankLedgerService
from fueleu_kernel.services.compliance_balance_service import ComplianceBalanceService
from fueleu_kernel.services.pool_service import PoolService

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _entry(entry_id, banked, minutes=0, ship_id="S1", year=2025):
    return BankEntry(
        entry_id=entry_id,
        ship_id=ship_id,
        year=year,
        banked_amount=Decimal(banked),
        applied_amount=Decimal("0"),
        created_at=T0 + timedelta(minutes=minutes),
    )


def _balance(ship_id, year, cb):
    return ComplianceBalance(
        ship_id=ship_id,
        year=year,
        cb_gco2eq=Decimal(cb),
        target_intensity=Decimal("89.3368"),
        actual_intensity=Decimal("85"),
        energy_in_scope=Decimal("1000"),
    )


class TestRouteSelector:

    def test_get_by_route_id(self, session, seeded_routes):
        route = RouteSelector(session).get_by_route_id("R003")

        assert route.vessel_type == "Tanker"
        assert route.ghg_intensity == Decimal("93.5")

    def test_get_by_storage_id(self, session, seeded_routes):
        first = seeded_routes[0]

        assert RouteSelector(session).get(first.id).route_id == "R001"

    def test_missing(self, session, seeded_routes):
        selector = RouteSelector(session)

        assert selector.get_by_route_id("R999") is None
        assert selector.get("no-such-id") is None

    def test_find_baseline_by_year(self, session, seeded_routes):
        selector = RouteSelector(session)

        assert selector.find_baseline(2024).route_id == "R001"
        assert selector.find_baseline(2025) is None

    def test_find_baseline_any_year_earliest(self, session, seeded_routes):
        from fueleu_kernel.services.route_service import RouteService

        RouteService(session).set_baseline("R005")

        assert RouteSelector(session).find_baseline().route_id == "R001"
        assert RouteSelector(session).find_baseline(2025).route_id == "R005"


class TestComplianceSelector:

    def test_get_missing(self, session):
        selector = ComplianceSelector(session)

        assert selector.get("S1", 2025) is None
        assert selector.get_adjusted("S1", 2025) is None

    def test_upsert_then_get(self, session):
        ComplianceBalanceService(session).upsert(_balance("S1", 2025, "1500"))

        stored = ComplianceSelector(session).get("S1", 2025)

        assert stored.cb_gco2eq == Decimal("1500")
        assert stored.energy_in_scope == Decimal("1000")

    def test_adjusted_adds_applied(self, session):
        ComplianceBalanceService(session).upsert(_balance("S1", 2025, "-800"))
        ledger = BankLedgerService(session)
        ledger.append(_entry("e1", "500"))
        ledger.record_consumption(FifoConsumption(
            requested=Decimal("300"),
            entries=(),
            applications=(BankApplication(entry_id="e1", amount=Decimal("300")),),
        ))

        adjusted = ComplianceSelector(session).get_adjusted("S1", 2025)

        assert adjusted.total_applied == Decimal("300")
        assert adjusted.adjusted_cb == Decimal("-500")

    def test_upsert_logs_insert_flag(self, session, captured_logs):
        service = ComplianceBalanceService(session)
        service.upsert(_balance("S1", 2025, "1"))
        service.upsert(_balance("S1", 2025, "2"))

        upserts = [r for r in captured_logs() if r["message"] == "compliance_balance_upserted"]
        assert [r["inserted"] for r in upserts] == [True, False]


class TestBankingSelector:

    def test_entries_oldest_first(self, session):
        ledger = BankLedgerService(session)
        ledger.append(_entry("late", "100", minutes=5))
        ledger.append(_entry("early", "200", minutes=0))

        entries = BankingSelector(session).list_entries("S1", 2025)

        assert [e.entry_id for e in entries] == ["early", "late"]

    def test_equal_timestamps_in_append_order(self, session):
        ledger = BankLedgerService(session)
        for entry_id in ("a", "b", "c"):
            ledger.append(_entry(entry_id, "10"))

        entries = BankingSelector(session).list_entries("S1", 2025, for_update=True)

        assert [e.entry_id for e in entries] == ["a", "b", "c"]

    def test_ledger_seq_per_ship_year(self, session):
        ledger = BankLedgerService(session)
        ledger.append(_entry("a", "10"))
        ledger.append(_entry("b", "10", ship_id="S2"))

        selector = BankingSelector(session)

        assert selector.next_ledger_seq("S1", 2025) == 2
        assert selector.next_ledger_seq("S2", 2025) == 2
        assert selector.next_ledger_seq("S1", 2024) == 1

    def test_totals(self, session):
        ledger = BankLedgerService(session)
        ledger.append(_entry("a", "100"))
        ledger.append(_entry("b", "50", minutes=1))
        ledger.record_consumption(FifoConsumption(
            requested=Decimal("120"),
            entries=(),
            applications=(
                BankApplication(entry_id="a", amount=Decimal("100")),
                BankApplication(entry_id="b", amount=Decimal("20")),
            ),
        ))

        selector = BankingSelector(session)

        assert selector.total_banked("S1", 2025) == Decimal("150")
        assert selector.total_applied("S1", 2025) == Decimal("120")
        assert selector.total_available("S1", 2025) == Decimal("30")

    def test_totals_empty(self, session):
        selector = BankingSelector(session)

        assert selector.total_banked("S1", 2025) == Decimal("0")
        assert selector.total_available("S1", 2025) == Decimal("0")

    def test_consumption_of_unknown_entry(self, session):
        with pytest.raises(ValueError):
            BankLedgerService(session).record_consumption(FifoConsumption(
                requested=Decimal("1"),
                entries=(),
                applications=(BankApplication(entry_id="ghost", amount=Decimal("1")),),
            ))


class TestPoolStore:

    def _result(self, pool_id="p-1", year=2025):
        members = (
            PoolMember(pool_id=pool_id, ship_id="S2", cb_before=Decimal("-500"), cb_after=Decimal("0")),
            PoolMember(pool_id=pool_id, ship_id="S1", cb_before=Decimal("1000"), cb_after=Decimal("500")),
        )
        return PoolResult(
            pool_id=pool_id,
            year=year,
            members=members,
            pool_sum=Decimal("500"),
            valid=True,
        )

    def test_record_and_read(self, session):
        pool = PoolService(session).record_pool(self._result(), created_at=T0)

        selector = PoolSelector(session)
        assert pool.pool_id == "p-1"
        assert selector.get("p-1").year == 2025
        assert [m.ship_id for m in selector.members("p-1")] == ["S2", "S1"]
        assert selector.members("p-1")[1].cb_after == Decimal("500")

    def test_list_by_year(self, session):
        service = PoolService(session)
        service.record_pool(self._result("p-1"), created_at=T0)
        service.record_pool(self._result("p-2"), created_at=T0 + timedelta(hours=1))
        service.record_pool(self._result("p-3", year=2026), created_at=T0)

        pools = PoolSelector(session).list_by_year(2025)

        assert [p.pool_id for p in pools] == ["p-1", "p-2"]

    def test_invalid_result_refused(self, session):
        invalid = PoolResult(
            pool_id=None,
            year=2025,
            members=(),
            pool_sum=Decimal("-1"),
            valid=False,
            reason="negative_pool_sum",
        )

        with pytest.raises(InvalidPoolError) as exc_info:
            PoolService(session).record_pool(invalid, created_at=T0)

        assert exc_info.value.reason == "negative_pool_sum"
        assert PoolSelector(session).list_by_year(2025) == []

    def test_get_missing(self, session):
        assert PoolSelector(session).get("nope") is None
        assert PoolSelector(session).members("nope") == []
