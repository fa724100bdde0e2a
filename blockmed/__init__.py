"""
BlockMed: client-side orchestration for a permissioned medical-record ledger.

It binds a wallet account to a session, works out whether that account owns
the HealthcareRecords contract, and mediates record queries, record writes by
authorized providers, and provider authorization by the owner.
"""

__all__ = [
    "Account",
    "Record",
    "RecordInput",
    "parse_patient_id",
]

from .app.domain.models import Account, Record, RecordInput, parse_patient_id

__version__ = "0.1.0"
