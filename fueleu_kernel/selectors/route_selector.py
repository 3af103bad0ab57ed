"""
Module: fueleu_kernel.selectors.route_selector
Responsibility: Read-only route queries -- listing, lookup by storage id or
    route code, and baseline discovery.
Architecture position: Kernel > Selectors.
"""

from sqlalchemy import select

from fueleu_kernel.domain.compliance import Route
from fueleu_kernel.models.route import RouteModel
from fueleu_kernel.selectors.base import BaseSelector


def route_from_model(model: RouteModel) -> Route:
    return Route(
        id=model.id,
        route_id=model.route_id,
        vessel_type=model.vessel_type,
        fuel_type=model.fuel_type,
        year=model.year,
        ghg_intensity=model.ghg_intensity,
        fuel_consumption=model.fuel_consumption,
        distance=model.distance,
        total_emissions=model.total_emissions,
        is_baseline=model.is_baseline,
    )


class RouteSelector(BaseSelector[RouteModel]):
    """Route lookups.  Results are ordered by (year, route_id)."""

    def list_all(self) -> list[Route]:
        rows = self.session.scalars(
            select(RouteModel).order_by(RouteModel.year, RouteModel.route_id)
        ).all()
        return [route_from_model(r) for r in rows]

    def get(self, id: str) -> Route | None:
        model = self.session.get(RouteModel, id)
        return route_from_model(model) if model is not None else None

    def get_by_route_id(self, route_id: str) -> Route | None:
        model = self.session.scalars(
            select(RouteModel).where(RouteModel.route_id == route_id)
        ).one_or_none()
        return route_from_model(model) if model is not None else None

    def find_baseline(self, year: int | None = None) -> Route | None:
        """
        Return the baseline route.

        With ``year`` given, that year's baseline.  Without it, the baseline
        of the earliest year that has one.
        """
        query = select(RouteModel).where(RouteModel.is_baseline.is_(True))
        if year is not None:
            query = query.where(RouteModel.year == year)
        model = self.session.scalars(
            query.order_by(RouteModel.year, RouteModel.route_id).limit(1)
        ).first()
        return route_from_model(model) if model is not None else None
