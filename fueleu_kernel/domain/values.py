"""
Values -- Decimal coercion for compliance quantities.

Responsibility:
    All compliance quantities (gCO2e balances, gCO2e/MJ intensities, MJ of
    energy, tonnes of fuel) are ``Decimal``.  Callers may hand in ints,
    strings or floats at the edge; ``to_decimal`` converts through ``str``
    so a float such as ``85.0`` becomes ``Decimal("85.0")`` rather than its
    binary expansion.

Failure modes:
    - ValueError on values that cannot be parsed as a finite number.

Amounts written to the bank ledger go through ``quantize_amount`` first so
the value a caller gets back is the value stored.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")

Numeric = Decimal | int | float | str


def to_decimal(value: Numeric, field: str = "value") -> Decimal:
    """Convert ``value`` to a finite Decimal.

    Raises:
        ValueError: If the value is not a finite number (bools included).
    """
    if isinstance(value, bool):
        raise ValueError(f"{field} must be numeric, got bool")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid {field}: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"{field} must be finite, got {value!r}")
    return result


# Scale of every stored amount column (Numeric(38, 9) in db/base.py).
AMOUNT_QUANTUM = Decimal("1E-9")


def quantize_amount(value: Decimal) -> Decimal:
    """Round ``value`` to the scale bank amounts are stored at."""
    return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
