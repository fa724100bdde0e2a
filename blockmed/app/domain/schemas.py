"""API I/O schemas."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import ConnectionState, Outcome, OutcomeKind, Record, Session


class RecordOut(BaseModel):
    record_id: int
    patient_name: str
    diagnosis: str
    treatment: str
    timestamp: int
    recorded_at: datetime

    @classmethod
    def from_record(cls, record: Record) -> "RecordOut":
        return cls(**record.model_dump(), recorded_at=record.recorded_at)


class RecordIn(BaseModel):
    patient_id: str = Field(..., description="patient ID as typed by the user")
    name: str = ""
    diagnosis: str = ""
    treatment: str = ""


class ProviderIn(BaseModel):
    address: str


class OutcomeOut(BaseModel):
    kind: OutcomeKind
    message: str
    command: str
    records: List[RecordOut] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "OutcomeOut":
        return cls(
            kind=outcome.kind,
            message=outcome.message,
            command=outcome.command,
            records=[RecordOut.from_record(r) for r in outcome.records],
        )


class SessionOut(BaseModel):
    state: ConnectionState
    account: Optional[str] = None
    account_display: Optional[str] = None
    is_owner: Optional[bool] = None
    patient_id: Optional[int] = None
    records: List[RecordOut] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        session: Session,
        patient_id: Optional[int],
        records: List[Record],
    ) -> "SessionOut":
        account = session.account
        return cls(
            state=session.state,
            account=str(account) if account else None,
            account_display=account.display if account else None,
            is_owner=session.is_owner,
            patient_id=patient_id,
            records=[RecordOut.from_record(r) for r in records],
        )
