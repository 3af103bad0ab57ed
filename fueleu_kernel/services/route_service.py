"""
RouteService -- route registration and baseline selection.

Invariants enforced:
    - At most one baseline per year: set_baseline clears every baseline of
      the route's year and sets the new one inside the same flush.
"""

from decimal import Decimal

from sqlalchemy import update

from fueleu_kernel.domain.compliance import Route
from fueleu_kernel.domain.values import Numeric, to_decimal
from fueleu_kernel.exceptions import RouteNotFoundError
from fueleu_kernel.logging_config import get_logger
from fueleu_kernel.models.route import RouteModel
from fueleu_kernel.selectors.route_selector import RouteSelector, route_from_model
from fueleu_kernel.services.base import BaseService

logger = get_logger("services.route")


class RouteService(BaseService[RouteModel]):
    """Write side of the route store."""

    def add_route(
        self,
        route_id: str,
        vessel_type: str,
        fuel_type: str,
        year: int,
        ghg_intensity: Numeric,
        fuel_consumption: Numeric,
        distance: Numeric,
        total_emissions: Numeric,
    ) -> Route:
        model = RouteModel(
            route_id=route_id,
            vessel_type=vessel_type,
            fuel_type=fuel_type,
            year=year,
            ghg_intensity=to_decimal(ghg_intensity, "ghg_intensity"),
            fuel_consumption=to_decimal(fuel_consumption, "fuel_consumption"),
            distance=to_decimal(distance, "distance"),
            total_emissions=to_decimal(total_emissions, "total_emissions"),
            is_baseline=False,
        )
        self.session.add(model)
        self.session.flush()

        logger.info("route_added", extra={
            "route_id": route_id,
            "year": year,
            "ghg_intensity": str(model.ghg_intensity),
        })
        return route_from_model(model)

    def set_baseline(self, route_id: str) -> Route:
        """
        Make ``route_id`` the baseline for its year.

        Raises:
            RouteNotFoundError: If no route has this route id.
        """
        route = RouteSelector(self.session).get_by_route_id(route_id)
        if route is None:
            logger.warning("baseline_route_not_found", extra={"route_id": route_id})
            raise RouteNotFoundError(route_id)

        self.session.execute(
            update(RouteModel)
            .where(RouteModel.year == route.year)
            .values(is_baseline=False)
        )
        self.session.execute(
            update(RouteModel)
            .where(RouteModel.id == route.id)
            .values(is_baseline=True)
        )
        self.session.flush()
        self.session.expire_all()

        logger.info("baseline_set", extra={
            "route_id": route_id,
            "year": route.year,
        })
        return Route(
            id=route.id,
            route_id=route.route_id,
            vessel_type=route.vessel_type,
            fuel_type=route.fuel_type,
            year=route.year,
            ghg_intensity=route.ghg_intensity,
            fuel_consumption=route.fuel_consumption,
            distance=route.distance,
            total_emissions=route.total_emissions,
            is_baseline=True,
        )
