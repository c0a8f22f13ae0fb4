from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from callback_bridge.core.binder import bind_known_callbacks
from callback_bridge.core.logging import StructuredLogFormatter, configure_logging, get_logger, log_progress
from callback_bridge.core.signal import HostFault, LastErrorSlot


@pytest.fixture
def reset_logging_handlers():
    root = logging.getLogger()
    existing_handlers = list(root.handlers)
    existing_level = root.level
    yield
    root.handlers = existing_handlers
    root.setLevel(existing_level)


class _ListHandler(logging.Handler):
    def __init__(self, formatter: logging.Formatter):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        self.records.append(record)


def test_structured_formatter_appends_extras():
    formatter = StructuredLogFormatter(use_color=False)
    record = logging.LogRecord(
        name="callback_bridge.core.binder",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=42,
        msg="Bound callback methods",
        args=(),
        exc_info=None,
    )
    record.count = 2
    record.method = ["get", "set"]
    record.tags = ("host.storage",)

    formatted = formatter.format(record)

    assert "Bound callback methods" in formatted
    assert "count=2" in formatted
    assert "method=[get, set]" in formatted
    assert "tags=[host.storage]" in formatted
    assert formatted.index("method=") < formatted.index("count=")


def test_configure_logging_installs_structured_formatter(reset_logging_handlers):
    configure_logging(force=True)
    root = logging.getLogger()
    assert root.handlers, "expected at least one handler configured"
    assert isinstance(root.handlers[0].formatter, StructuredLogFormatter)


def test_log_level_taken_from_environment(reset_logging_handlers, monkeypatch):
    monkeypatch.setenv("CALLBACK_BRIDGE_LOG_LEVEL", "debug")
    configure_logging(force=True)
    assert logging.getLogger().level == logging.DEBUG


def test_log_progress_populates_record_extras(reset_logging_handlers):
    configure_logging(logging.DEBUG, force=True)
    logger = get_logger("test.progress", tags=["install"])
    root = logging.getLogger()
    collector = _ListHandler(root.handlers[0].formatter)
    root.addHandler(collector)
    try:
        log_progress(logger, "Installing catalog", phase="install", step="storage.sync", status="started")
    finally:
        root.removeHandler(collector)

    record = collector.records[0]
    assert getattr(record, "phase") == "install"
    assert getattr(record, "step") == "storage.sync"
    assert getattr(record, "status") == "started"
    assert getattr(record, "tags") == ("install",)
    assert "phase=install" in collector.format(record)


def test_binder_logs_bound_methods(reset_logging_handlers):
    configure_logging(logging.DEBUG, force=True)
    root = logging.getLogger()
    collector = _ListHandler(root.handlers[0].formatter)
    root.addHandler(collector)
    try:
        bind_known_callbacks(SimpleNamespace(get=lambda callback: callback()), {"get"})
    finally:
        root.removeHandler(collector)

    records = [record for record in collector.records if record.name == "callback_bridge.core.binder"]
    assert records
    assert getattr(records[0], "method") == ["get"]
    assert getattr(records[0], "count") == 1


def test_error_slot_reporting_restores_previous_value():
    slot = LastErrorSlot()
    outer = HostFault("outer")
    slot.set(outer)

    with slot.reporting(HostFault("inner")):
        assert slot.get().message == "inner"

    assert slot.get() is outer
    slot.clear()
    assert slot.get() is None


def test_error_slot_restores_on_exception():
    slot = LastErrorSlot()

    with pytest.raises(ValueError):
        with slot.reporting("failure"):
            raise ValueError("callback blew up")

    assert slot.get() is None


def test_host_fault_string_forms():
    assert str(HostFault("message only")) == "message only"
    assert str(HostFault(code="E1")) == "E1"
    assert str(HostFault("text", code="E2")) == "E2: text"
    assert str(HostFault()) == "unknown host fault"
