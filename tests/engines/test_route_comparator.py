"""Tests for the RouteComparator engine."""

from decimal import Decimal

import pytest

from fueleu_engines.comparison import RouteComparator
from fueleu_kernel.domain.compliance import Route


def _route(route_id, intensity, year=2024, is_baseline=False):
    return Route(
        id=f"id-{route_id}",
        route_id=route_id,
        vessel_type="Container",
        fuel_type="HFO",
        year=year,
        ghg_intensity=Decimal(intensity),
        fuel_consumption=Decimal("5000"),
        distance=Decimal("12000"),
        total_emissions=Decimal("4500"),
        is_baseline=is_baseline,
    )


class TestCompare:

    @pytest.fixture(autouse=True)
    def _comparator(self, regulation):
        self.comparator = RouteComparator(regulation)
        self.baseline = _route("R001", "91.0", is_baseline=True)

    def test_lower_intensity(self):
        result = self.comparator.compare(self.baseline, _route("R002", "88.0"))

        assert result.route_id == "R002"
        assert result.baseline is self.baseline
        assert result.comparison.route_id == "R002"
        assert result.percent_diff.quantize(Decimal("0.0001")) == Decimal("-3.2967")
        assert result.compliant

    def test_higher_intensity(self):
        result = self.comparator.compare(self.baseline, _route("R003", "93.5"))

        assert result.percent_diff.quantize(Decimal("0.0001")) == Decimal("2.7473")
        assert not result.compliant

    def test_equal_to_baseline(self):
        result = self.comparator.compare(self.baseline, _route("R006", "91.0"))

        assert result.percent_diff == Decimal("0")

    def test_compliant_at_exact_target(self):
        result = self.comparator.compare(self.baseline, _route("R007", "89.3368"))

        assert result.compliant

    def test_just_above_target_not_compliant(self):
        result = self.comparator.compare(self.baseline, _route("R008", "89.3369"))

        assert not result.compliant

    def test_zero_baseline_rejected(self):
        with pytest.raises(ValueError):
            self.comparator.compare(_route("R000", "0"), _route("R002", "88.0"))


class TestCompareAll:

    def test_baseline_excluded(self, regulation):
        comparator = RouteComparator(regulation)
        baseline = _route("R001", "91.0", is_baseline=True)
        routes = [baseline, _route("R002", "88.0"), _route("R003", "93.5")]

        results = comparator.compare_all(baseline, routes)

        assert [r.route_id for r in results] == ["R002", "R003"]
        assert [r.compliant for r in results] == [True, False]
