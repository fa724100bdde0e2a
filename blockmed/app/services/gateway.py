"""Typed boundary to the HealthcareRecords contract.

The gateway holds no session state and never retries. It only tells apart a
call that never reached the ledger (RemoteUnavailable) from one the ledger
refused (RemoteRejected), passing the remote message through verbatim.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List

from requests.exceptions import RequestException
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from ..domain.errors import RemoteRejected, RemoteUnavailable
from ..domain.models import Account, PendingTransaction, Record, RecordInput, TransactionReceipt

logger = logging.getLogger(__name__)


class LedgerGateway(ABC):
    """The remote operations the session controller relies on."""

    @abstractmethod
    def get_owner(self) -> Account: ...

    @abstractmethod
    def get_patient_records(self, patient_id: int) -> List[Record]:
        """Records in ledger order; empty when the patient has none."""

    @abstractmethod
    def is_authorized(self, account: Account) -> bool:
        """Read-only: may this account add records."""

    @abstractmethod
    def add_record(self, record: RecordInput, signer) -> PendingTransaction: ...

    @abstractmethod
    def authorize_provider(self, target: Account, signer) -> PendingTransaction:
        """Grant write access; callers must check ownership first."""

    @abstractmethod
    def wait_for_finalization(
        self, pending: PendingTransaction, timeout: float
    ) -> TransactionReceipt: ...


def _remote_message(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) and message else str(exc)


@contextmanager
def remote_call(operation: str) -> Iterator[None]:
    """Translate web3/transport faults into the gateway's two failure kinds."""
    try:
        yield
    except ContractLogicError as exc:
        logger.warning("%s rejected by ledger: %s", operation, exc)
        raise RemoteRejected(_remote_message(exc)) from exc
    except TimeExhausted as exc:
        logger.warning("%s not finalized in time", operation)
        raise RemoteUnavailable(f"Timed out waiting for {operation} to finalize") from exc
    except (Web3Exception, RequestException, ConnectionError) as exc:
        # includes node-side RPC errors: locked account, bad nonce, low funds
        logger.warning("%s could not reach ledger: %s", operation, exc)
        raise RemoteUnavailable(_remote_message(exc)) from exc


class Web3LedgerGateway(LedgerGateway):
    """LedgerGateway backed by a web3 contract handle."""

    def __init__(self, w3: Web3, contract: Contract, poll_interval: float = 0.5) -> None:
        self.w3 = w3
        self.contract = contract
        self.poll_interval = poll_interval

    def get_owner(self) -> Account:
        with remote_call("getOwner"):
            owner = self.contract.functions.getOwner().call()
        return Account(owner)

    def get_patient_records(self, patient_id: int) -> List[Record]:
        with remote_call("getPatientRecords"):
            rows = self.contract.functions.getPatientRecords(patient_id).call()
        return [Record.from_chain(row) for row in rows]

    def is_authorized(self, account: Account) -> bool:
        address = Web3.to_checksum_address(account.address)
        with remote_call("isAuthorized"):
            return bool(self.contract.functions.isAuthorized(address).call())

    def add_record(self, record: RecordInput, signer) -> PendingTransaction:
        call = self.contract.functions.addRecord(
            record.patient_id,
            record.name,
            record.diagnosis,
            record.treatment,
        )
        with remote_call("addRecord"):
            tx_hash = signer.submit(self.w3, call)
        logger.info("addRecord submitted for patient %s: %s", record.patient_id, Web3.to_hex(tx_hash))
        return PendingTransaction(tx_hash=Web3.to_hex(tx_hash), operation="addRecord")

    def authorize_provider(self, target: Account, signer) -> PendingTransaction:
        call = self.contract.functions.authorizeProvider(Web3.to_checksum_address(target.address))
        with remote_call("authorizeProvider"):
            tx_hash = signer.submit(self.w3, call)
        logger.info("authorizeProvider submitted for %s: %s", target, Web3.to_hex(tx_hash))
        return PendingTransaction(tx_hash=Web3.to_hex(tx_hash), operation="authorizeProvider")

    def wait_for_finalization(
        self, pending: PendingTransaction, timeout: float
    ) -> TransactionReceipt:
        with remote_call(pending.operation):
            receipt = self.w3.eth.wait_for_transaction_receipt(
                pending.tx_hash, timeout=timeout, poll_latency=self.poll_interval
            )
        status = int(receipt["status"])
        if status != 1:
            raise RemoteRejected(f"Transaction {pending.tx_hash} reverted")
        return TransactionReceipt(
            tx_hash=pending.tx_hash,
            block_number=receipt.get("blockNumber"),
            status=status,
        )
