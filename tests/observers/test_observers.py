import json
import logging

from gpuinit.observers.dispatcher import EventBus
from gpuinit.observers.events import StepFailed, StepRetried, new_ctx, stamp
from gpuinit.observers.jsonfile import JsonFileObserver
from gpuinit.observers.logger import LoggerObserver


class Broken:
    def notify(self, event):
        raise RuntimeError("disk full")


class Collect:
    def __init__(self):
        self.seen = []

    def notify(self, event):
        self.seen.append(event)


def _event():
    ctx = new_ctx(run_id="run-1", node="gpu-node-0")
    return StepRetried(step="apt-get update", attempt=2, reason="returned failure", **stamp(ctx))


def test_bus_keeps_going_when_an_observer_fails():
    sink = Collect()
    bus = EventBus([Broken(), sink])
    bus.emit(_event())
    assert len(sink.seen) == 1


def test_json_observer_appends_one_line_per_event(tmp_path):
    path = tmp_path / "nested" / "run.jsonl"
    ob = JsonFileObserver(path)
    ob.notify(_event())
    ob.notify(_event())

    lines = path.read_text().splitlines()
    assert len(lines) == 2
    rec = json.loads(lines[0])
    assert rec["event"] == "StepRetried"
    assert rec["run_id"] == "run-1"
    assert rec["node"] == "gpu-node-0"
    assert rec["attempt"] == 2


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_logger_observer_logs_at_debug():
    logger = logging.getLogger("observer-test")
    logger.setLevel(logging.DEBUG)
    handler = ListHandler()
    logger.addHandler(handler)
    try:
        LoggerObserver(logger).notify(_event())
    finally:
        logger.removeHandler(handler)

    (record,) = handler.records
    assert record.levelno == logging.DEBUG
    assert record.getMessage().startswith("[event] StepRetried step=apt-get update attempt=2")
    assert "run_id=" not in record.getMessage()


def test_logger_observer_raises_failures_to_warning():
    logger = logging.getLogger("observer-test")
    logger.setLevel(logging.DEBUG)
    handler = ListHandler()
    logger.addHandler(handler)
    ctx = new_ctx(run_id="run-1", node="gpu-node-0")
    try:
        LoggerObserver(logger).notify(
            StepFailed(state="DriverInstall", step="apt-get install", error="boom", **stamp(ctx))
        )
    finally:
        logger.removeHandler(handler)

    assert handler.records[0].levelno == logging.WARNING
