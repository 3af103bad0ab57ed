"""
End-to-end tests for ComplianceLedgerService over a real database session.

Covers:
- CB calculation and storage, including recalculation
- CB derived from route telemetry
- Deposit / apply banking flow with FIFO persistence
- Pool creation, rejection and retrieval
- Route listing, baseline selection and comparison
"""

from decimal import Decimal

import pytest

from fueleu_engines.pooling import REASON_EXIT_CONDITION, PoolAllocator
from fueleu_kernel.exceptions import (
    BaselineNotFoundError,
    ComplianceBalanceNotFoundError,
    InsufficientBankedError,
    InvalidAmountError,
    InvalidPoolError,
    PoolNotFoundError,
    RouteNotFoundError,
)
from fueleu_kernel.selectors.compliance_selector import ComplianceSelector
from fueleu_kernel.services.route_service import RouteService

SURPLUS_CB = Decimal("889044000")  # 85.0 gCO2e/MJ, 5000 t
DEFICIT_CB = Decimal("-340956000")  # 91.0 gCO2e/MJ, 5000 t


class TestComplianceBalance:

    def test_calculate_and_store(self, ledger, session):
        cb = ledger.calculate_cb("S1", 2024, 85.0, 5000)

        assert cb.energy_in_scope == Decimal("205000000")
        assert cb.cb_gco2eq == SURPLUS_CB
        assert ledger.get_cb("S1", 2024).cb_gco2eq == SURPLUS_CB

    def test_recalculation_replaces(self, ledger, session):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        ledger.calculate_cb("S1", 2025, "91.0", "5000")

        assert ledger.get_cb("S1", 2025).cb_gco2eq == DEFICIT_CB
        assert len(ComplianceSelector(session).list_by_year(2025)) == 1

    def test_ship_years_independent(self, ledger):
        ledger.calculate_cb("S1", 2024, "85.0", "5000")
        ledger.calculate_cb("S1", 2025, "91.0", "5000")

        assert ledger.get_cb("S1", 2024).cb_gco2eq == SURPLUS_CB
        assert ledger.get_cb("S1", 2025).cb_gco2eq == DEFICIT_CB

    def test_missing_cb(self, ledger):
        with pytest.raises(ComplianceBalanceNotFoundError) as exc_info:
            ledger.get_adjusted_cb("ghost", 2025)

        assert exc_info.value.code == "COMPLIANCE_BALANCE_NOT_FOUND"
        assert exc_info.value.ship_id == "ghost"
        assert exc_info.value.year == 2025

    def test_adjusted_without_banking_equals_cb(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        adjusted = ledger.get_adjusted_cb("S1", 2025)

        assert adjusted.total_applied == Decimal("0")
        assert adjusted.adjusted_cb == SURPLUS_CB


class TestRouteDerivedBalance:

    def test_from_route(self, ledger, seeded_routes):
        cb = ledger.calculate_cb_for_route("R002", 2024)

        assert cb.ship_id == "R002"
        assert cb.actual_intensity == Decimal("88.0")
        assert cb.cb_gco2eq == Decimal("263082240")

    def test_deficit_route(self, ledger, seeded_routes):
        cb = ledger.calculate_cb_for_route("R001", 2024)

        assert cb.cb_gco2eq == DEFICIT_CB

    def test_unknown_route(self, ledger, seeded_routes):
        with pytest.raises(RouteNotFoundError) as exc_info:
            ledger.calculate_cb_for_route("R999", 2024)

        assert exc_info.value.route_id == "R999"


class TestBanking:

    def _bank_then_fall_into_deficit(self, ledger, clock):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        ledger.deposit("S1", 2025, "1000")
        clock.advance(60)
        ledger.deposit("S1", 2025, "500")
        ledger.calculate_cb("S1", 2025, "91.0", "5000")

    def test_deposit_defaults_to_full_cb(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        entry = ledger.deposit("S1", 2025)

        assert entry.banked_amount == SURPLUS_CB
        assert entry.applied_amount == Decimal("0")
        assert ledger.available_banked("S1", 2025) == SURPLUS_CB

    def test_deposit_partial(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        entry = ledger.deposit("S1", 2025, "1000")

        assert entry.banked_amount == Decimal("1000")
        records = ledger.list_bank_records("S1", 2025)
        assert [r.banked_amount for r in records] == [Decimal("1000")]

    def test_deposit_rounded_to_stored_scale(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        entry = ledger.deposit("S1", 2025, "1.0000000004")

        assert entry.banked_amount == Decimal("1.000000000")
        records = ledger.list_bank_records("S1", 2025)
        assert [r.banked_amount for r in records] == [entry.banked_amount]

    def test_apply_rounded_to_stored_scale(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        result = ledger.apply_banked("S1", 2025, "0.1234567894")

        assert result.applied == Decimal("0.123456789")
        records = ledger.list_bank_records("S1", 2025)
        assert records[0].applied_amount == result.applied

    def test_deposit_with_deficit_rejected(self, ledger):
        ledger.calculate_cb("S1", 2025, "91.0", "5000")

        with pytest.raises(InvalidAmountError):
            ledger.deposit("S1", 2025)

        assert ledger.list_bank_records("S1", 2025) == []

    def test_deposit_non_positive_amount_rejected(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        with pytest.raises(InvalidAmountError):
            ledger.deposit("S1", 2025, "0")

    def test_deposit_without_cb(self, ledger):
        with pytest.raises(ComplianceBalanceNotFoundError):
            ledger.deposit("S1", 2025, "100")

    def test_apply_consumes_fifo(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        result = ledger.apply_banked("S1", 2025, "1200")

        assert result.cb_before == DEFICIT_CB
        assert result.applied == Decimal("1200")
        assert result.cb_after == DEFICIT_CB + Decimal("1200")

        records = ledger.list_bank_records("S1", 2025)
        assert [r.applied_amount for r in records] == [Decimal("1000"), Decimal("200")]
        assert ledger.available_banked("S1", 2025) == Decimal("300")

    def test_adjusted_cb_reflects_applied(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)
        ledger.apply_banked("S1", 2025, "1200")

        adjusted = ledger.get_adjusted_cb("S1", 2025)

        assert adjusted.cb_gco2eq == DEFICIT_CB
        assert adjusted.total_applied == Decimal("1200")
        assert adjusted.adjusted_cb == DEFICIT_CB + Decimal("1200")

    def test_successive_applies_chain(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        first = ledger.apply_banked("S1", 2025, "700")
        second = ledger.apply_banked("S1", 2025, "700")

        assert second.cb_before == first.cb_after
        assert second.cb_after == DEFICIT_CB + Decimal("1400")
        records = ledger.list_bank_records("S1", 2025)
        assert [r.applied_amount for r in records] == [Decimal("1000"), Decimal("400")]

    def test_apply_more_than_available(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        with pytest.raises(InsufficientBankedError) as exc_info:
            ledger.apply_banked("S1", 2025, "1501")

        assert Decimal(exc_info.value.available) == Decimal("1500")
        records = ledger.list_bank_records("S1", 2025)
        assert all(r.applied_amount == Decimal("0") for r in records)

    def test_apply_non_positive(self, ledger, deterministic_clock):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        with pytest.raises(InvalidAmountError):
            ledger.apply_banked("S1", 2025, "-5")

    def test_apply_with_nothing_banked(self, ledger):
        ledger.calculate_cb("S1", 2025, "91.0", "5000")

        with pytest.raises(InsufficientBankedError):
            ledger.apply_banked("S1", 2025, "1")

    def test_equal_timestamps_consumed_in_deposit_order(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        first = ledger.deposit("S1", 2025, "100")
        second = ledger.deposit("S1", 2025, "100")

        ledger.apply_banked("S1", 2025, "150")

        records = {r.entry_id: r for r in ledger.list_bank_records("S1", 2025)}
        assert records[first.entry_id].applied_amount == Decimal("100")
        assert records[second.entry_id].applied_amount == Decimal("50")

    def test_apply_logs_carry_ship_context(self, ledger, deterministic_clock, captured_logs):
        self._bank_then_fall_into_deficit(ledger, deterministic_clock)

        ledger.apply_banked("S1", 2025, "100")

        recorded = [r for r in captured_logs() if r["message"] == "bank_consumption_recorded"]
        assert recorded[-1]["ship_id"] == "S1"


class TestPooling:

    def _three_ships(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        ledger.calculate_cb("S2", 2025, "91.0", "5000")
        ledger.calculate_cb("S3", 2025, "89.2", "4900")

    def test_create_pool(self, ledger):
        self._three_ships(ledger)

        result = ledger.create_pool(2025, ["S1", "S2", "S3"])

        assert result.valid
        assert result.pool_sum == SURPLUS_CB + DEFICIT_CB + Decimal("27483120")
        assert result.member("S1").cb_after == Decimal("548088000")
        assert result.member("S2").cb_after == Decimal("0")
        assert result.member("S3").cb_after == Decimal("27483120")

    def test_pool_persisted(self, ledger):
        self._three_ships(ledger)
        created = ledger.create_pool(2025, ["S1", "S2", "S3"])

        stored = ledger.get_pool(created.pool_id)

        assert stored.pool_id == created.pool_id
        assert stored.year == 2025
        assert [m.ship_id for m in stored.members] == ["S1", "S2", "S3"]
        assert [m.cb_after for m in stored.members] == [m.cb_after for m in created.members]
        assert stored.pool_sum == created.pool_sum
        assert [p.pool_id for p in ledger.list_pools(2025)] == [created.pool_id]
        assert ledger.list_pools(2024) == []

    def test_negative_pool_rejected_and_not_persisted(self, ledger):
        ledger.calculate_cb("S2", 2025, "91.0", "5000")
        ledger.calculate_cb("S4", 2025, "90.0", "1000")

        with pytest.raises(InvalidPoolError) as exc_info:
            ledger.create_pool(2025, ["S2", "S4"])

        assert exc_info.value.code == "INVALID_POOL"
        assert Decimal(exc_info.value.pool_sum) < 0
        assert ledger.list_pools(2025) == []

    def test_pool_uses_adjusted_cb(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")
        ledger.deposit("S1", 2025, "1000")
        ledger.calculate_cb("S1", 2025, "91.0", "5000")
        ledger.apply_banked("S1", 2025, "1000")
        ledger.calculate_cb("S3", 2025, "85.0", "5000")

        result = ledger.create_pool(2025, ["S1", "S3"])

        assert result.member("S1").cb_before == DEFICIT_CB + Decimal("1000")
        assert result.member("S1").cb_after == Decimal("0")

    def test_missing_member_cb(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        with pytest.raises(ComplianceBalanceNotFoundError):
            ledger.create_pool(2025, ["S1", "ghost"])

        assert ledger.list_pools(2025) == []

    def test_duplicate_ship_ids(self, ledger):
        ledger.calculate_cb("S1", 2025, "85.0", "5000")

        with pytest.raises(ValueError):
            ledger.create_pool(2025, ["S1", "S1"])

    def test_empty_ship_list_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.create_pool(2025, [])

        assert ledger.list_pools(2025) == []

    def test_exit_condition_rejected_and_not_persisted(self, ledger, monkeypatch):
        self._three_ships(ledger)
        monkeypatch.setattr(
            PoolAllocator, "_allocate",
            staticmethod(lambda original: {ship: cb - 1 for ship, cb in original.items()}),
        )

        with pytest.raises(InvalidPoolError) as exc_info:
            ledger.create_pool(2025, ["S1", "S2", "S3"])

        assert exc_info.value.reason == REASON_EXIT_CONDITION
        assert ledger.list_pools(2025) == []

    def test_unknown_pool(self, ledger):
        with pytest.raises(PoolNotFoundError):
            ledger.get_pool("nope")


class TestRoutes:

    def test_list_routes(self, ledger, seeded_routes):
        routes = ledger.list_routes()

        assert [r.route_id for r in routes] == ["R001", "R002", "R003", "R004", "R005"]
        assert [r.is_baseline for r in routes] == [True, False, False, False, False]

    def test_set_baseline_clears_same_year(self, ledger, seeded_routes):
        route = ledger.set_baseline("R002")

        assert route.is_baseline
        baselines = [r.route_id for r in ledger.list_routes() if r.is_baseline]
        assert baselines == ["R002"]

    def test_set_baseline_other_year_keeps_existing(self, ledger, seeded_routes):
        ledger.set_baseline("R004")

        baselines = [r.route_id for r in ledger.list_routes() if r.is_baseline]
        assert baselines == ["R001", "R004"]

    def test_set_baseline_unknown(self, ledger, seeded_routes):
        with pytest.raises(RouteNotFoundError):
            ledger.set_baseline("R999")

    def test_compare_routes(self, ledger, seeded_routes):
        comparisons = ledger.compare_routes()

        assert [c.route_id for c in comparisons] == ["R002", "R003", "R004", "R005"]
        assert [c.compliant for c in comparisons] == [True, False, True, False]
        assert all(c.baseline.route_id == "R001" for c in comparisons)
        assert comparisons[0].percent_diff < 0
        assert comparisons[1].percent_diff > 0

    def test_compare_skips_every_baseline(self, ledger, seeded_routes):
        ledger.set_baseline("R004")

        comparisons = ledger.compare_routes()

        assert [c.route_id for c in comparisons] == ["R002", "R003", "R005"]

    def test_compare_without_baseline(self, ledger, session):
        RouteService(session).add_route(
            route_id="R010",
            vessel_type="Tanker",
            fuel_type="MGO",
            year=2025,
            ghg_intensity="90",
            fuel_consumption="100",
            distance="1000",
            total_emissions="90",
        )

        with pytest.raises(BaselineNotFoundError):
            ledger.compare_routes()
