"""Outcome sinks: where command results are announced."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ..domain.models import OutcomeKind, OutcomeLog
from ..infra import db

logger = logging.getLogger(__name__)


class OutcomeSink(ABC):
    """Fire-and-forget receiver of (kind, message) notifications."""

    @abstractmethod
    def notify(
        self,
        kind: OutcomeKind,
        message: str,
        *,
        command: str = "",
        account: Optional[str] = None,
    ) -> None: ...


@dataclass(frozen=True)
class Notification:
    kind: OutcomeKind
    message: str
    command: str = ""
    account: Optional[str] = None


class RecordingSink(OutcomeSink):
    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, kind, message, *, command="", account=None) -> None:
        self.notifications.append(Notification(kind, message, command, account))


class LoggingSink(OutcomeSink):
    def notify(self, kind, message, *, command="", account=None) -> None:
        level = logging.INFO if kind is OutcomeKind.SUCCESS else logging.WARNING
        logger.log(level, "[%s] %s: %s", command or "-", kind.value, message)


class OutcomeLogSink(OutcomeSink):
    """Persists every notification to the outcome_log table."""

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self.engine = engine or db.engine
        self.factory = db.make_session_factory(self.engine)

    def notify(self, kind, message, *, command="", account=None) -> None:
        try:
            with db.get_session(self.factory) as session:
                session.add(
                    OutcomeLog(kind=kind, command=command, message=message, account=account)
                )
        except SQLAlchemyError:
            logger.exception("failed to persist %s outcome for %s", kind.value, command)

    def recent(self, limit: int = 100, command: Optional[str] = None) -> List[OutcomeLog]:
        with db.get_session(self.factory) as session:
            stmt = select(OutcomeLog).order_by(OutcomeLog.id.desc()).limit(limit)
            if command:
                stmt = stmt.where(OutcomeLog.command == command)
            rows = list(session.exec(stmt).all())
            for row in rows:
                session.expunge(row)
            return rows


class FanoutSink(OutcomeSink):
    def __init__(self, sinks: Sequence[OutcomeSink]) -> None:
        self.sinks = list(sinks)

    def notify(self, kind, message, *, command="", account=None) -> None:
        for sink in self.sinks:
            try:
                sink.notify(kind, message, command=command, account=account)
            except Exception:
                logger.exception("%s failed to deliver %s outcome", type(sink).__name__, command)
