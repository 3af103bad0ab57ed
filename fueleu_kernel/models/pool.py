"""
Module: fueleu_kernel.models.pool
Responsibility: ORM persistence for pools and their members.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - A pool header and all its member rows are added in the same flush
      (PoolService.record_pool); there is no API to add members later.
    - One member row per (pool, ship).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fueleu_kernel.db.base import Base


class PoolModel(Base):
    """Pool header."""

    __tablename__ = "pools"

    __table_args__ = (
        Index("idx_pool_year", "year"),
    )

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    pool_sum: Mapped[Decimal] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    members: Mapped[list["PoolMemberModel"]] = relationship(
        back_populates="pool",
        order_by="PoolMemberModel.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Pool {self.id}: {self.year} sum={self.pool_sum}>"


class PoolMemberModel(Base):
    """One ship's CB before and after pooling."""

    __tablename__ = "pool_members"

    __table_args__ = (
        UniqueConstraint("pool_id", "ship_id", name="uq_pool_member_ship"),
    )

    pool_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("pools.id"),
        nullable=False,
    )
    ship_id: Mapped[str] = mapped_column(String(50), nullable=False)

    # Order in which the ship was supplied to the pool
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    cb_before: Mapped[Decimal] = mapped_column(nullable=False)
    cb_after: Mapped[Decimal] = mapped_column(nullable=False)

    pool: Mapped[PoolModel] = relationship(back_populates="members")

    def __repr__(self) -> str:
        return (
            f"<PoolMember {self.pool_id}/{self.ship_id}: "
            f"{self.cb_before} -> {self.cb_after}>"
        )
