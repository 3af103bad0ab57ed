"""
Pure domain layer.

This module contains immutable records and value helpers with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (beyond the injectable Clock interface)
- I/O
"""

from fueleu_kernel.domain.banking import (
    BankApplication,
    BankEntry,
    BankingResult,
    FifoConsumption,
)
from fueleu_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from fueleu_kernel.domain.compliance import (
    AdjustedComplianceBalance,
    ComplianceBalance,
    Route,
    RouteComparison,
)
from fueleu_kernel.domain.identifiers import (
    IdGenerator,
    SequentialIdGenerator,
    uuid_generator,
)
from fueleu_kernel.domain.pooling import Pool, PoolMember, PoolResult
from fueleu_kernel.domain.values import ZERO, to_decimal

__all__ = [
    "AdjustedComplianceBalance",
    "BankApplication",
    "BankEntry",
    "BankingResult",
    "Clock",
    "ComplianceBalance",
    "DeterministicClock",
    "FifoConsumption",
    "IdGenerator",
    "Pool",
    "PoolMember",
    "PoolResult",
    "Route",
    "RouteComparison",
    "SequentialIdGenerator",
    "SystemClock",
    "ZERO",
    "to_decimal",
    "uuid_generator",
]
