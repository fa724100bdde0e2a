"""Domain models for the record session."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from sqlmodel import Field as SQLField, SQLModel
from web3 import Web3

from .errors import ValidationError

UINT256_LIMIT = 2**256
INVALID_PATIENT_ID = "Please enter a valid Patient ID (must be a number)."

_PATIENT_ID_PATTERN = re.compile(r"^\s*\+?([0-9]+)\s*$")


@dataclass(frozen=True, eq=False)
class Account:
    """Chain address compared case-insensitively."""

    address: str

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Account):
            return self.address.lower() == other.address.lower()
        if isinstance(other, str):
            return self.address.lower() == other.lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address.lower())

    def __str__(self) -> str:
        return self.address

    @property
    def display(self) -> str:
        return f"{self.address[:6]}...{self.address[-4:]}"


def parse_account(raw: Optional[str]) -> Account:
    value = (raw or "").strip()
    if not value:
        raise ValidationError("Please enter a provider address.")
    if not Web3.is_address(value):
        raise ValidationError(f"Invalid account address: {value}")
    return Account(value)


def parse_patient_id(raw: Any) -> int:
    """Parse free text into a patient key (base 10, non-negative, uint256)."""
    if isinstance(raw, bool):
        raise ValidationError(INVALID_PATIENT_ID)
    if isinstance(raw, int):
        value = raw
    else:
        match = _PATIENT_ID_PATTERN.match(raw if isinstance(raw, str) else "")
        if not match:
            raise ValidationError(INVALID_PATIENT_ID)
        value = int(match.group(1), 10)
    if value < 0 or value >= UINT256_LIMIT:
        raise ValidationError(INVALID_PATIENT_ID)
    return value


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CONNECT_FAILED = "connect_failed"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class RecordInput(BaseModel):
    patient_id: int
    name: str = ""
    diagnosis: str = ""
    treatment: str = ""

    model_config = ConfigDict(frozen=True)


class Record(BaseModel):
    """A ledger record as returned by getPatientRecords."""

    record_id: int
    patient_name: str
    diagnosis: str
    treatment: str
    timestamp: int

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_chain(cls, raw: Tuple[Any, ...]) -> "Record":
        record_id, patient_name, diagnosis, treatment, timestamp = raw
        return cls(
            record_id=int(record_id),
            patient_name=patient_name,
            diagnosis=diagnosis,
            treatment=treatment,
            timestamp=int(timestamp),
        )

    @property
    def recorded_at(self) -> datetime:
        # ledger stores seconds
        millis = self.timestamp * 1000
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class PendingTransaction:
    """A submitted state change that has not been finalized yet."""

    tx_hash: str
    operation: str


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: Optional[int] = None
    status: int = 1


@dataclass(frozen=True)
class Session:
    """Who is connected and with which privileges.

    is_owner stays None until the owner query resolves.
    """

    state: ConnectionState = ConnectionState.DISCONNECTED
    account: Optional[Account] = None
    is_owner: Optional[bool] = None
    signer: Any = None

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a command, as handed to the caller."""

    kind: OutcomeKind
    message: str
    command: str
    error: Optional[str] = None
    records: List[Record] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


class OutcomeLog(SQLModel, table=True):
    """Persisted notification row."""

    __tablename__ = "outcome_log"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    kind: OutcomeKind
    command: str = SQLField(index=True)
    message: str
    account: Optional[str] = SQLField(default=None, index=True)
    created_at: datetime = SQLField(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )


class OutcomeLogRead(BaseModel):
    id: int
    kind: OutcomeKind
    command: str
    message: str
    account: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
