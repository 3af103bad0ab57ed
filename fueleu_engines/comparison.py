"""
Module: fueleu_engines.comparison
Responsibility:
    Compare a route's GHG intensity against the baseline route and flag
    whether it meets the regulatory target.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - ValueError when the baseline intensity is zero.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from fueleu_config.schema import RegulationParameters
from fueleu_engines.tracer import traced_engine
from fueleu_kernel.domain.compliance import Route, RouteComparison
from fueleu_kernel.domain.values import ZERO
from fueleu_kernel.logging_config import get_logger

logger = get_logger("engines.comparison")

_HUNDRED = Decimal("100")


class RouteComparator:
    """Percent deviation from baseline plus a target compliance flag."""

    def __init__(self, regulation: RegulationParameters):
        self._regulation = regulation

    @traced_engine("comparison", "1.0")
    def compare(self, baseline: Route, route: Route) -> RouteComparison:
        """
        ``percent_diff = (route / baseline - 1) * 100`` on GHG intensity.

        ``compliant`` is True when the route's intensity does not exceed
        the target intensity for the route's year.
        """
        if baseline.ghg_intensity == ZERO:
            raise ValueError(
                f"Baseline route {baseline.route_id} has zero GHG intensity"
            )

        percent_diff = (route.ghg_intensity / baseline.ghg_intensity - 1) * _HUNDRED
        target = self._regulation.target_intensity(route.year)

        return RouteComparison(
            route_id=route.route_id,
            baseline=baseline,
            comparison=route,
            percent_diff=percent_diff,
            compliant=route.ghg_intensity <= target,
        )

    def compare_all(self, baseline: Route, routes: Iterable[Route]) -> list[RouteComparison]:
        """Compare every route other than the baseline itself."""
        comparisons = [
            self.compare(baseline, route)
            for route in routes
            if route.route_id != baseline.route_id
        ]
        logger.info("routes_compared", extra={
            "baseline_route_id": baseline.route_id,
            "comparison_count": len(comparisons),
        })
        return comparisons
