"""SQLAlchemy ORM models for the FuelEU kernel."""

from fueleu_kernel.models.bank_entry import BankEntryModel
from fueleu_kernel.models.compliance import ShipComplianceModel
from fueleu_kernel.models.pool import PoolMemberModel, PoolModel
from fueleu_kernel.models.route import RouteModel

__all__ = [
    "BankEntryModel",
    "PoolMemberModel",
    "PoolModel",
    "RouteModel",
    "ShipComplianceModel",
]
