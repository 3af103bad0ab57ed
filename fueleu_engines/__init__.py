"""
Module: fueleu_engines
Responsibility:
    Package entrypoint re-exporting the pure compliance engines.  This is
    the canonical import surface for fueleu_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fueleu_kernel/domain, fueleu_kernel.exceptions,
    fueleu_kernel.logging_config and fueleu_config.schema.
    MUST NOT import fueleu_services or the persistence layers.

Invariants enforced:
    - Purity: engines never call ``datetime.now()``; time and identifiers
      are injected (Clock, IdGenerator).
    - Decimal-only arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``fueleu_engines.tracer``), emitting FUELEU_ENGINE_TRACE records with
    engine name, version, input fingerprint and duration.
"""

from fueleu_kernel.logging_config import get_logger

logger = get_logger("engines")

from fueleu_engines.banking import BankingLedger
from fueleu_engines.comparison import RouteComparator
from fueleu_engines.compliance import ComplianceCalculator
from fueleu_engines.pooling import (
    REASON_EXIT_CONDITION,
    REASON_NEGATIVE_SUM,
    PoolAllocator,
)
from fueleu_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "BankingLedger",
    "ComplianceCalculator",
    "PoolAllocator",
    "REASON_EXIT_CONDITION",
    "REASON_NEGATIVE_SUM",
    "RouteComparator",
    "compute_input_fingerprint",
    "traced_engine",
]
