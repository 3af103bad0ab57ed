"""
fueleu_services -- caller-facing orchestration over the compliance engines.

Services hold a caller-owned SQLAlchemy Session and never commit.
"""

from fueleu_services.compliance_ledger_service import ComplianceLedgerService

__all__ = ["ComplianceLedgerService"]
