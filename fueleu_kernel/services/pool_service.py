"""
PoolService -- persist a valid pool and its members as one unit.

Invariants enforced:
    - All-or-nothing: the header and every member row are added before a
      single flush; an invalid PoolResult is refused outright.
"""

from datetime import datetime

from fueleu_kernel.domain.pooling import Pool, PoolResult
from fueleu_kernel.exceptions import InvalidPoolError
from fueleu_kernel.logging_config import get_logger
from fueleu_kernel.models.pool import PoolMemberModel, PoolModel
from fueleu_kernel.services.base import BaseService

logger = get_logger("services.pool")


class PoolService(BaseService[PoolModel]):
    """Write side of the pool store."""

    def record_pool(self, result: PoolResult, created_at: datetime) -> Pool:
        if not result.valid or result.pool_id is None:
            raise InvalidPoolError(
                result.year, result.pool_sum, result.reason or "pool not valid"
            )

        pool = PoolModel(
            id=result.pool_id,
            year=result.year,
            pool_sum=result.pool_sum,
            created_at=created_at,
        )
        pool.members = [
            PoolMemberModel(
                pool_id=result.pool_id,
                ship_id=m.ship_id,
                position=position,
                cb_before=m.cb_before,
                cb_after=m.cb_after,
            )
            for position, m in enumerate(result.members)
        ]
        self.session.add(pool)
        self.session.flush()

        logger.info("pool_recorded", extra={
            "pool_id": result.pool_id,
            "year": result.year,
            "member_count": len(result.members),
            "pool_sum": str(result.pool_sum),
        })
        return Pool(pool_id=result.pool_id, year=result.year, created_at=created_at)
