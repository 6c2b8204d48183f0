import threading
import time
from contextlib import nullcontext

import pytest

from import_engine.errors import FlushError
from import_engine.flush import FlushTask, run_flush


class _Engine:
    def begin(self):
        return nullcontext()


class _Store:
    """Stands in for CatalogStore; writers here never touch a connection."""
    engine = _Engine()


def _recording(sink):
    def write(_conn, chunk):
        sink.append(list(chunk))
        return len(chunk)
    return write


def _failing(message, barrier=None):
    def write(_conn, _chunk):
        if barrier is not None:
            barrier.wait()
        raise RuntimeError(message)
    return write


def test_chunks_written_in_order():
    seen = []
    counts = run_flush(_Store(), [FlushTask("varchar", list(range(7)), _recording(seen))],
                       batch_size=3)

    assert counts == {"varchar": 7}
    assert seen == [[0, 1, 2], [3, 4, 5], [6]]


def test_empty_tasks_are_skipped():
    seen = []
    counts = run_flush(_Store(), [
        FlushTask("int", [], _recording(seen)),
        FlushTask("text", [1], _recording(seen)),
    ], batch_size=10)

    assert counts == {"text": 1}
    assert seen == [[1]]


def test_no_tasks_returns_empty_counts():
    assert run_flush(_Store(), [], batch_size=10) == {}


def test_every_failure_is_reported():
    both_running = threading.Barrier(2, timeout=5)
    tasks = [
        FlushTask("stock", [1], _failing("stock broke", both_running)),
        FlushTask("price_index", [1], _failing("price broke", both_running)),
    ]
    with pytest.raises(FlushError) as info:
        run_flush(_Store(), tasks, batch_size=10, workers=2)

    err = info.value
    assert {dest for dest, _ in err.errors} == {"stock", "price_index"}
    assert all(isinstance(exc, RuntimeError) for _, exc in err.errors)
    assert str(err).endswith("(+1 more failed destinations)")


def test_successful_counts_survive_failure():
    tasks = [
        FlushTask("varchar", [1, 2, 3], _recording([])),
        FlushTask("stock", [1], _failing("boom")),
    ]
    with pytest.raises(FlushError) as info:
        run_flush(_Store(), tasks, batch_size=10, workers=1)

    assert info.value.counts == {"varchar": 3}
    assert str(info.value) == "stock: boom"


def test_failure_cancels_remaining_chunks():
    failed = threading.Event()
    written = []

    def slow(_conn, chunk):
        failed.wait(timeout=5)
        time.sleep(0.2)
        written.append(chunk)
        return len(chunk)

    def fail(_conn, _chunk):
        try:
            raise RuntimeError("fail fast")
        finally:
            failed.set()

    tasks = [
        FlushTask("text", list(range(10)), slow),
        FlushTask("gallery", [1], fail),
    ]
    with pytest.raises(FlushError) as info:
        run_flush(_Store(), tasks, batch_size=2, workers=2)

    assert [dest for dest, _ in info.value.errors] == ["gallery"]
    # The in-flight chunk finishes; the remaining four are never started
    assert written == [[0, 1]]
    assert "text" not in info.value.counts
