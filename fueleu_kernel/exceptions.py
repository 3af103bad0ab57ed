"""
Typed Exception Hierarchy for the FuelEU Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Compliance accounting has a small, closed set of failure kinds. Callers
(HTTP adapters, CLIs, batch jobs) must react to each one differently, so
every failure has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (ship_id, year, amounts, ...)

Example:
    try:
        service.apply_banked("S1", 2025, Decimal("300"))
    except InsufficientBankedError as e:
        api_response(code=e.code, requested=e.requested, available=e.available)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FuelEUError (base)
    |
    +-- InvalidAmountError
    +-- InsufficientBankedError
    +-- InvalidPoolError
    +-- RegulationConfigError
    |
    +-- NotFoundError
        +-- ComplianceBalanceNotFoundError
        +-- RouteNotFoundError
        +-- BaselineNotFoundError
        +-- PoolNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                          | When Raised
------------------------------|-----------------------------------------------
INVALID_AMOUNT                | Non-positive amount where positive required
INSUFFICIENT_BANKED           | Apply amount exceeds available banked total
INVALID_POOL                  | Negative pool sum or exit condition violated
REGULATION_CONFIG_INVALID     | Regulation parameters failed validation
COMPLIANCE_BALANCE_NOT_FOUND  | No computed CB for (ship, year)
ROUTE_NOT_FOUND               | Route id does not exist
BASELINE_NOT_FOUND            | No baseline route is set
POOL_NOT_FOUND                | Pool id does not exist

All failures are synchronous and are never retried inside the kernel.
"""

from decimal import Decimal


class FuelEUError(Exception):
    """
    Base exception for all FuelEU kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FUELEU_ERROR"


class InvalidAmountError(FuelEUError):
    """A strictly positive amount was required."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: Decimal, operation: str):
        self.amount = str(amount)
        self.operation = operation
        super().__init__(
            f"Amount for {operation} must be positive, got {amount}"
        )


class InsufficientBankedError(FuelEUError):
    """Requested application exceeds the available banked surplus."""

    code: str = "INSUFFICIENT_BANKED"

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = str(requested)
        self.available = str(available)
        super().__init__(
            f"Cannot apply {requested}: only {available} banked surplus available"
        )


class InvalidPoolError(FuelEUError):
    """
    Pool rejected.

    Either the members are collectively in deficit (pool_sum < 0) or a
    member would leave the pool in violation of its exit condition.
    """

    code: str = "INVALID_POOL"

    def __init__(self, year: int, pool_sum: Decimal, reason: str):
        self.year = year
        self.pool_sum = str(pool_sum)
        self.reason = reason
        super().__init__(
            f"Pool for {year} is invalid ({reason}): pool sum {pool_sum}"
        )


class RegulationConfigError(FuelEUError):
    """Regulation parameters could not be loaded or failed validation."""

    code: str = "REGULATION_CONFIG_INVALID"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = errors
        super().__init__(
            f"Invalid regulation configuration in {source}: {'; '.join(errors)}"
        )


# Lookup failures


class NotFoundError(FuelEUError):
    """Base exception for missing ship-years, routes, baselines and pools."""

    code: str = "NOT_FOUND"


class ComplianceBalanceNotFoundError(NotFoundError):
    """No CB has been computed for the ship-year."""

    code: str = "COMPLIANCE_BALANCE_NOT_FOUND"

    def __init__(self, ship_id: str, year: int):
        self.ship_id = ship_id
        self.year = year
        super().__init__(f"Compliance balance not found for ship {ship_id} in {year}")


class RouteNotFoundError(NotFoundError):
    """Route with given route id was not found."""

    code: str = "ROUTE_NOT_FOUND"

    def __init__(self, route_id: str):
        self.route_id = route_id
        super().__init__(f"Route not found: {route_id}")


class BaselineNotFoundError(NotFoundError):
    """No route is marked as baseline."""

    code: str = "BASELINE_NOT_FOUND"

    def __init__(self, year: int | None = None):
        self.year = year
        if year is None:
            super().__init__("No baseline route found")
        else:
            super().__init__(f"No baseline route found for {year}")


class PoolNotFoundError(NotFoundError):
    """Pool with given id was not found."""

    code: str = "POOL_NOT_FOUND"

    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Pool not found: {pool_id}")
