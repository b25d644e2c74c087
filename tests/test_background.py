"""Tests for fire-and-forget dispatch."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import BackgroundDispatcher
from app.domain.entities import DispatchReport


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, name, report, error) -> None:
        self.calls.append((name, report, error))


def test_report_reaches_the_sink() -> None:
    sink = RecordingSink()
    dispatcher = BackgroundDispatcher(max_workers=1, error_sink=sink)
    report = DispatchReport(event_type="system_maintenance", template_id=None, aborted=True)

    def notify_system_message():
        return report

    future = dispatcher.submit(notify_system_message)
    dispatcher.shutdown(wait=True)

    assert future.result() is report
    assert sink.calls == [("notify_system_message", report, None)]


def test_exception_reaches_the_sink() -> None:
    sink = RecordingSink()
    dispatcher = BackgroundDispatcher(error_sink=sink)
    dispatcher.start()

    def explode(value):
        raise ValueError(value)

    dispatcher.submit(explode, "bad payload")
    dispatcher.shutdown()

    ((name, report, error),) = sink.calls
    assert name == "explode"
    assert report is None
    assert isinstance(error, ValueError)


def test_broken_sink_does_not_break_dispatch(caplog) -> None:
    def sink(name, report, error):
        raise RuntimeError("sink down")

    dispatcher = BackgroundDispatcher(error_sink=sink)
    future = dispatcher.submit(lambda: 42)
    dispatcher.shutdown()

    assert future.result() == 42
    assert "error sink failed" in caplog.text


def test_submit_after_shutdown_is_refused() -> None:
    dispatcher = BackgroundDispatcher()
    dispatcher.start()
    assert dispatcher.running

    dispatcher.shutdown()
    dispatcher.shutdown()

    assert not dispatcher.running
    with pytest.raises(RuntimeError):
        dispatcher.submit(print)
