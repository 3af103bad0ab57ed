"""Services for the FuelEU kernel (write side)."""

from fueleu_kernel.services.bank_ledger_service import BankLedgerService
from fueleu_kernel.services.compliance_balance_service import (
    ComplianceBalanceService,
)
from fueleu_kernel.services.pool_service import PoolService
from fueleu_kernel.services.route_service import RouteService

__all__ = [
    "BankLedgerService",
    "ComplianceBalanceService",
    "PoolService",
    "RouteService",
]
