"""
Module: fueleu_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Provides
    the string-UUID primary key convention and the type annotation map for
    consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - String primary keys: ids are generated by an injected IdGenerator in the
      domain layer (uuid4 strings in production, readable sequences in tests);
      rows inserted without one fall back to a uuid4 string.
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(38, 9).  NEVER use float for compliance quantities.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is a string of at most 64 characters.
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
        - int maps to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        # 38 digits total, 9 decimal places
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        int: BigInteger,
    }

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=_new_id,
    )
