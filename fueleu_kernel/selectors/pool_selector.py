"""
Module: fueleu_kernel.selectors.pool_selector
Responsibility: Read pools and their members.
Architecture position: Kernel > Selectors.
"""

from sqlalchemy import select

from fueleu_kernel.domain.pooling import Pool, PoolMember
from fueleu_kernel.models.pool import PoolMemberModel, PoolModel
from fueleu_kernel.selectors.base import BaseSelector


def pool_from_model(model: PoolModel) -> Pool:
    return Pool(pool_id=model.id, year=model.year, created_at=model.created_at)


def member_from_model(model: PoolMemberModel) -> PoolMember:
    return PoolMember(
        pool_id=model.pool_id,
        ship_id=model.ship_id,
        cb_before=model.cb_before,
        cb_after=model.cb_after,
    )


class PoolSelector(BaseSelector[PoolModel]):
    """Pool lookups by id or year."""

    def get(self, pool_id: str) -> Pool | None:
        model = self.session.get(PoolModel, pool_id)
        return pool_from_model(model) if model is not None else None

    def list_by_year(self, year: int) -> list[Pool]:
        rows = self.session.scalars(
            select(PoolModel)
            .where(PoolModel.year == year)
            .order_by(PoolModel.created_at, PoolModel.id)
        ).all()
        return [pool_from_model(r) for r in rows]

    def members(self, pool_id: str) -> list[PoolMember]:
        """Members in the order the ships were supplied to the pool."""
        rows = self.session.scalars(
            select(PoolMemberModel)
            .where(PoolMemberModel.pool_id == pool_id)
            .order_by(PoolMemberModel.position)
        ).all()
        return [member_from_model(r) for r in rows]
