"""Selectors for the FuelEU kernel (read side)."""

from fueleu_kernel.selectors.banking_selector import BankingSelector
from fueleu_kernel.selectors.compliance_selector import ComplianceSelector
from fueleu_kernel.selectors.pool_selector import PoolSelector
from fueleu_kernel.selectors.route_selector import RouteSelector

__all__ = [
    "BankingSelector",
    "ComplianceSelector",
    "PoolSelector",
    "RouteSelector",
]
