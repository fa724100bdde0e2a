import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from blockmed.app.domain.models import OutcomeKind, OutcomeLog
from blockmed.app.services.outcomes import (
    FanoutSink,
    LoggingSink,
    OutcomeLogSink,
    OutcomeSink,
    RecordingSink,
)


def _memory_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def test_outcome_log_persists_and_lists_newest_first():
    sink = OutcomeLogSink(_memory_engine())
    sink.notify(OutcomeKind.ERROR, "bad id", command="fetch_records")
    sink.notify(OutcomeKind.SUCCESS, "Record added successfully", command="add_record", account="0xabc")

    rows = sink.recent()

    assert [r.message for r in rows] == ["Record added successfully", "bad id"]
    assert rows[0].kind is OutcomeKind.SUCCESS
    assert rows[0].account == "0xabc"


def test_outcome_log_filters_by_command():
    sink = OutcomeLogSink(_memory_engine())
    sink.notify(OutcomeKind.ERROR, "a", command="fetch_records")
    sink.notify(OutcomeKind.ERROR, "b", command="authorize_provider")

    assert [r.message for r in sink.recent(command="authorize_provider")] == ["b"]


def test_outcome_log_without_table_does_not_raise(caplog):
    engine = create_engine("sqlite://", poolclass=StaticPool)
    with caplog.at_level(logging.ERROR):
        OutcomeLogSink(engine).notify(OutcomeKind.ERROR, "lost", command="connect")
    assert "failed to persist" in caplog.text


def test_fanout_reaches_every_sink(caplog):
    first, second = RecordingSink(), RecordingSink()
    with caplog.at_level(logging.INFO):
        FanoutSink([first, second, LoggingSink()]).notify(
            OutcomeKind.SUCCESS, "ok", command="connect"
        )

    assert first.notifications == second.notifications
    assert first.notifications[0].message == "ok"
    assert "[connect] success: ok" in caplog.text


class BrokenSink(OutcomeSink):
    def notify(self, kind, message, *, command="", account=None):
        raise RuntimeError("sink down")


def test_fanout_continues_past_failing_sink(caplog):
    recording = RecordingSink()
    with caplog.at_level(logging.ERROR):
        FanoutSink([BrokenSink(), recording]).notify(OutcomeKind.ERROR, "bad id", command="fetch_records")

    assert [n.message for n in recording.notifications] == ["bad id"]
    assert "BrokenSink failed to deliver fetch_records outcome" in caplog.text


def test_outcome_log_timestamps_are_timezone_aware():
    row = OutcomeLog(kind=OutcomeKind.SUCCESS, command="connect", message="ok")
    assert row.created_at.tzinfo is not None
