from typing import Dict, List

import pytest

from blockmed.app.domain.errors import UserRejected
from blockmed.app.domain.models import (
    Account,
    PendingTransaction,
    Record,
    RecordInput,
    TransactionReceipt,
)
from blockmed.app.services.controller import RecordSessionController
from blockmed.app.services.gateway import LedgerGateway
from blockmed.app.services.identity import IdentityBinder, Wallet
from blockmed.app.services.outcomes import RecordingSink

OWNER = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
PROVIDER = "0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2"
STRANGER = "0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db"

MUTATING = {"add_record", "authorize_provider"}


class FakeLedger(LedgerGateway):
    """In-process ledger that records every remote call made against it."""

    def __init__(self, owner: str = OWNER) -> None:
        self.owner = owner
        self.records: Dict[int, List[Record]] = {}
        self.authorized = {Account(owner)}
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.reflect_writes = True

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def get_owner(self) -> Account:
        self._enter("get_owner")
        return Account(self.owner)

    def get_patient_records(self, patient_id: int) -> List[Record]:
        self._enter("get_patient_records")
        return list(self.records.get(patient_id, []))

    def is_authorized(self, account: Account) -> bool:
        self._enter("is_authorized")
        return account in self.authorized

    def add_record(self, record: RecordInput, signer) -> PendingTransaction:
        self._enter("add_record")
        self._pending = ("add", record)
        return PendingTransaction(tx_hash="0x01", operation="addRecord")

    def authorize_provider(self, target: Account, signer) -> PendingTransaction:
        self._enter("authorize_provider")
        self._pending = ("authorize", target)
        return PendingTransaction(tx_hash="0x02", operation="authorizeProvider")

    def wait_for_finalization(self, pending, timeout) -> TransactionReceipt:
        self._enter("wait_for_finalization")
        action, value = self._pending
        if action == "add" and self.reflect_writes:
            existing = self.records.setdefault(value.patient_id, [])
            existing.append(
                Record(
                    record_id=len(existing) + 1,
                    patient_name=value.name,
                    diagnosis=value.diagnosis,
                    treatment=value.treatment,
                    timestamp=1_700_000_000,
                )
            )
        elif action == "authorize":
            self.authorized.add(value)
        return TransactionReceipt(tx_hash=pending.tx_hash, block_number=7)

    def mutating_calls(self) -> List[str]:
        return [call for call in self.calls if call in MUTATING]


class FakeWallet(Wallet):
    def __init__(self, address: str = OWNER, error: Exception | None = None) -> None:
        self.address = address
        self.error = error
        self.requests = 0

    def request_access(self):
        self.requests += 1
        if self.error:
            raise self.error
        return Account(self.address), f"signer:{self.address}"


def make_record(record_id: int, name: str = "Jane Roe", timestamp: int = 1_700_000_000) -> Record:
    return Record(
        record_id=record_id,
        patient_name=name,
        diagnosis="Flu",
        treatment="Rest",
        timestamp=timestamp,
    )


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_controller(ledger, sink):
    """Build a controller for the given account, connected unless told otherwise."""

    def factory(address: str = OWNER, connect: bool = True, wallet: Wallet | None = None):
        binder = IdentityBinder(wallet or FakeWallet(address), ledger)
        controller = RecordSessionController(ledger, binder, sink, finalization_timeout=5)
        if connect:
            controller.connect()
            sink.notifications.clear()
            ledger.calls.clear()
        return controller

    return factory


@pytest.fixture
def rejecting_wallet() -> FakeWallet:
    return FakeWallet(error=UserRejected("User rejected the request."))
