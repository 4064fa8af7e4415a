import threading

import pytest

from conftest import RecordingNotifier, finishedTask
from core.interfaces.image_source_interface import ImageSource
from core.scan.scan_outcome import ScanStatus
from core.scan.scan_task import ScanResult, ScanState, ScanTask
from services.impl.json_history_store import JsonHistoryStore
from services.impl.result_sink import ResultSink
from services.live_scan_gate import CameraScanEvent, LiveScanGate


@pytest.fixture
def gate():
    return LiveScanGate()


@pytest.fixture
def sink(notifier, historyStore, gate):
    return ResultSink(notifier, historyStore, gate)


def test_success_is_shown_and_recorded(sink, notifier, historyStore):
    task = finishedTask(
        ScanState.SUCCEEDED,
        ScanResult(payload="https://example.com", codeType="url", symbology="QRCode")
    )

    assert sink.deliver(task)

    assert notifier.kinds() == ["result"]
    assert notifier.calls[0][1].payload == "https://example.com"
    entries = historyStore.list()
    assert len(entries) == 1
    assert entries[0].id == task.id
    assert entries[0].type == "url"
    assert entries[0].data == "https://example.com"
    assert entries[0].timestamp


def test_not_found_is_a_neutral_notice(sink, notifier, historyStore):
    sink.deliver(finishedTask(ScanState.NOT_FOUND, ScanResult()))

    assert notifier.calls == [("notice", "No QR Code Found", "Could not detect a QR code in this image.")]
    assert historyStore.list() == []


def test_failure_shows_human_readable_cause(sink, notifier, historyStore):
    sink.deliver(finishedTask(
        ScanState.FAILED,
        ScanResult(errorKind="decode_error", errorReason="Image data is corrupt or truncated")
    ))

    kind, title, message = notifier.calls[0]
    assert kind == "error"
    assert "corrupt" in message
    assert historyStore.list() == []


def test_timeout_recommends_smaller_image(sink, notifier, historyStore):
    sink.deliver(finishedTask(ScanState.TIMED_OUT))

    kind, title, message = notifier.calls[0]
    assert kind == "notice"
    assert title == "Scan Timed Out"
    assert "smaller" in message
    assert historyStore.list() == []


def test_cancel_is_silent(sink, notifier, historyStore, gate):
    received = []
    sink.deliver(finishedTask(ScanState.CANCELLED), received.append)

    assert notifier.calls == []
    assert historyStore.list() == []
    assert not gate.isSuspended()
    assert [o.status for o in received] == [ScanStatus.CANCELLED]


def test_second_delivery_is_ignored(sink, notifier, historyStore):
    task = finishedTask(ScanState.SUCCEEDED, ScanResult(payload="hi", codeType="text"))
    received = []

    assert sink.deliver(task, received.append)
    assert not sink.deliver(task, received.append)

    assert len(received) == 1
    assert notifier.kinds() == ["result"]
    assert len(historyStore.list()) == 1
    assert sink.isDelivered(task.id)


def test_concurrent_deliveries_notify_once(sink, notifier, historyStore):
    task = finishedTask(ScanState.SUCCEEDED, ScanResult(payload="hi", codeType="text"))
    start = threading.Barrier(8)
    results = []

    def deliver():
        start.wait()
        results.append(sink.deliver(task))

    threads = [threading.Thread(target=deliver) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert len(notifier.calls) == 1
    assert len(historyStore.list()) == 1


def test_non_terminal_task_is_rejected(sink):
    with pytest.raises(ValueError):
        sink.deliver(ScanTask(ImageSource(data=b"x"), 5))


def test_shown_result_suspends_live_scan_until_acknowledged(sink, gate):
    sink.deliver(finishedTask(ScanState.NOT_FOUND, ScanResult()))

    assert gate.isSuspended()
    assert not gate.offer(CameraScanEvent("qr", "same code"))

    sink.acknowledge()
    assert not gate.isSuspended()


def test_callback_errors_do_not_escape(sink):
    def explode(outcome):
        raise RuntimeError("caller bug")

    assert sink.deliver(finishedTask(ScanState.NOT_FOUND, ScanResult()), explode)


def test_works_without_history_or_gate():
    notifier = RecordingNotifier()
    sink = ResultSink(notifier)
    sink.deliver(finishedTask(ScanState.SUCCEEDED, ScanResult(payload="x", codeType="text")))
    assert notifier.kinds() == ["result"]


def test_history_write_failure_is_logged_not_raised(notifier, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    store = JsonHistoryStore(path=str(blocker / "history.json"))
    sink = ResultSink(notifier, store)

    assert sink.deliver(finishedTask(ScanState.SUCCEEDED, ScanResult(payload="x", codeType="text")))
    assert notifier.kinds() == ["result"]


def test_only_recent_task_ids_are_remembered(notifier):
    sink = ResultSink(notifier, maxTracked=2)
    first, second, third = (finishedTask(ScanState.NOT_FOUND, ScanResult()) for _ in range(3))

    for task in (first, second, third):
        assert sink.deliver(task)

    assert not sink.isDelivered(first.id)
    assert sink.isDelivered(second.id)
    assert sink.isDelivered(third.id)
    assert not sink.deliver(third)
    assert len(notifier.calls) == 3
