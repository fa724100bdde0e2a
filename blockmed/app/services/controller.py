"""Record session controller: the session state machine and its commands.

States run Disconnected -> Connecting -> Connected, with ConnectFailed when the
wallet or the owner lookup fails (connect may be retried from there). Commands
are serialized per controller. Each one validates input locally, checks the
needed capability, talks to the ledger, and ends in exactly one Outcome. Errors
never escape a command; they are reported to the sink and returned.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional

from ..domain import policy
from ..domain.errors import INTERNAL_ERROR, BlockMedError
from ..domain.models import (
    ConnectionState,
    Outcome,
    OutcomeKind,
    Record,
    RecordInput,
    Session,
    parse_account,
    parse_patient_id,
)
from .gateway import LedgerGateway
from .identity import IdentityBinder
from .outcomes import OutcomeSink

logger = logging.getLogger(__name__)

CONNECT_ERROR = "Error connecting to wallet: "
FETCH_ERROR = "Error fetching patient records: "
CHECK_ERROR = "Error checking authorization: "
ADD_ERROR = "Error adding records: "
AUTHORIZE_ERROR = "Error authorizing provider: "


class RecordSessionController:
    def __init__(
        self,
        gateway: LedgerGateway,
        binder: IdentityBinder,
        sink: OutcomeSink,
        finalization_timeout: float = 120.0,
    ) -> None:
        self.gateway = gateway
        self.binder = binder
        self.sink = sink
        self.finalization_timeout = finalization_timeout
        self._lock = threading.Lock()
        self._session = Session()
        self._patient_id: Optional[int] = None
        self._records: List[Record] = []

    @property
    def session(self) -> Session:
        return self._session

    @property
    def patient_id(self) -> Optional[int]:
        return self._patient_id

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def connect(self) -> Outcome:
        with self._lock:
            self._session = Session(state=ConnectionState.CONNECTING)
            self._records = []
            self._patient_id = None
            try:
                session = self.binder.connect()
            except BlockMedError as exc:
                self._session = Session(state=ConnectionState.CONNECT_FAILED)
                return self._fail("connect", exc, CONNECT_ERROR)
            except Exception as exc:
                self._session = Session(state=ConnectionState.CONNECT_FAILED)
                return self._crash("connect", exc)
            self._session = session
            role = "owner" if session.is_owner else "account"
            return self._succeed("connect", f"Connected as {role} {session.account.display}")

    def fetch_records(self, raw_patient_id: Any) -> Outcome:
        with self._lock:
            return self._fetch(raw_patient_id)

    def add_record(
        self,
        raw_patient_id: Any,
        name: str = "",
        diagnosis: str = "",
        treatment: str = "",
    ) -> Outcome:
        with self._lock:
            try:
                patient_id = parse_patient_id(raw_patient_id)
                policy.require_connected(self._session)
            except BlockMedError as exc:
                return self._fail("add_record", exc)

            logger.debug("add_record for patient %s by %s", patient_id, self._session.account)
            try:
                authorized = self.gateway.is_authorized(self._session.account)
            except BlockMedError as exc:
                return self._fail("add_record", exc, CHECK_ERROR)
            except Exception as exc:
                return self._crash("add_record", exc)

            try:
                policy.require_provider(authorized)
            except BlockMedError as exc:
                return self._fail("add_record", exc)

            try:
                record = RecordInput(
                    patient_id=patient_id,
                    name=name,
                    diagnosis=diagnosis,
                    treatment=treatment,
                )
                pending = self.gateway.add_record(record, self._session.signer)
                receipt = self.gateway.wait_for_finalization(pending, self.finalization_timeout)
            except BlockMedError as exc:
                return self._fail("add_record", exc, ADD_ERROR)
            except Exception as exc:
                return self._crash("add_record", exc)

            logger.info("record for patient %s finalized in %s", patient_id, receipt.tx_hash)
            refreshed = self._fetch(patient_id)
            return self._succeed("add_record", "Record added successfully", refreshed.records)

    def authorize_provider(self, raw_target: Optional[str]) -> Outcome:
        with self._lock:
            try:
                target = parse_account(raw_target)
                policy.require_connected(self._session)
                policy.require_owner(self._session)
            except BlockMedError as exc:
                return self._fail("authorize_provider", exc)

            logger.debug("authorize_provider %s by owner %s", target, self._session.account)
            try:
                pending = self.gateway.authorize_provider(target, self._session.signer)
                self.gateway.wait_for_finalization(pending, self.finalization_timeout)
            except BlockMedError as exc:
                return self._fail("authorize_provider", exc, AUTHORIZE_ERROR)
            except Exception as exc:
                return self._crash("authorize_provider", exc)

            return self._succeed("authorize_provider", f"Provider {target} authorized successfully")

    def _fetch(self, raw_patient_id: Any) -> Outcome:
        # the record set always mirrors the latest attempt, so clear it first
        self._records = []
        self._patient_id = None
        try:
            patient_id = parse_patient_id(raw_patient_id)
            policy.require_connected(self._session)
        except BlockMedError as exc:
            return self._fail("fetch_records", exc)

        self._patient_id = patient_id
        logger.debug("fetching records for patient %s", patient_id)
        try:
            records = self.gateway.get_patient_records(patient_id)
        except BlockMedError as exc:
            return self._fail("fetch_records", exc, FETCH_ERROR)
        except Exception as exc:
            return self._crash("fetch_records", exc)

        self._records = list(records)
        # silent: a successful fetch is shown, not announced
        return Outcome(
            kind=OutcomeKind.SUCCESS,
            message=f"{len(self._records)} record(s) for patient {patient_id}",
            command="fetch_records",
            records=list(self._records),
        )

    def _account(self) -> Optional[str]:
        account = self._session.account
        return str(account) if account else None

    def _notify(self, kind: OutcomeKind, message: str, command: str) -> None:
        try:
            self.sink.notify(kind, message, command=command, account=self._account())
        except Exception:
            logger.exception("outcome sink failed for %s", command)

    def _succeed(self, command: str, message: str, records: Optional[List[Record]] = None) -> Outcome:
        self._notify(OutcomeKind.SUCCESS, message, command)
        return Outcome(
            kind=OutcomeKind.SUCCESS,
            message=message,
            command=command,
            records=list(records or []),
        )

    def _fail(self, command: str, exc: BlockMedError, prefix: str = "") -> Outcome:
        message = prefix + exc.message
        logger.warning("%s failed (%s): %s", command, exc.kind, exc.message)
        self._notify(OutcomeKind.ERROR, message, command)
        return Outcome(kind=OutcomeKind.ERROR, message=message, command=command, error=exc.kind)

    def _crash(self, command: str, exc: Exception) -> Outcome:
        logger.exception("%s failed unexpectedly", command)
        message = f"Unexpected error during {command.replace('_', ' ')}: {exc}"
        self._notify(OutcomeKind.ERROR, message, command)
        return Outcome(kind=OutcomeKind.ERROR, message=message, command=command, error=INTERNAL_ERROR)
