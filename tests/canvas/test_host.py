from __future__ import annotations

import threading
import time

import pytest

from engine.canvas.errors import ResolutionError, UnknownSurfaceError
from engine.canvas.host import SurfaceHost
from engine.canvas.queue import DrainPolicy, Operation, OperationQueue
from engine.canvas.surface import RecordingSurface


def test_submit_returns_one_result_per_op_in_order(host: SurfaceHost, surface: RecordingSurface) -> None:
    ops = [
        Operation.of("clearRect", [0, 0, 300, 300]),
        Operation.of("fillStyle", ["#ref:missing"]),
        Operation.of("fillRect", [1, 2, 3, 4]),
    ]
    results = host.submit("canvas", ops)
    assert len(results) == 3
    assert [r.success for r in results] == [True, False, True]
    assert isinstance(results[1].error, ResolutionError)
    assert surface.call_names() == ["clearRect", "fillRect"]


def test_reference_table_outlives_queues_until_retire(host: SurfaceHost) -> None:
    q = OperationQueue()
    q.add_ref("frame", [0, 0, 10, 10])
    host.submit("canvas", q)
    assert q.drained

    q2 = OperationQueue()
    q2.append("strokeRect", ["#spreadRef:frame"])
    assert host.submit("canvas", q2)[0].success

    table = host.table("canvas")
    host.retire("canvas")
    assert len(table) == 0
    assert not host.has_surface("canvas")
    with pytest.raises(UnknownSurfaceError):
        host.submit("canvas", [Operation.of("fill")])
    host.retire("canvas")  # no-op


def test_tables_are_per_surface() -> None:
    h = SurfaceHost(policy=DrainPolicy.CONTINUE)
    a, b = RecordingSurface(), RecordingSurface()
    h.register("a", a)
    h.register("b", b)
    h.submit("a", [Operation.of("addRef", ["x", 1])])
    assert "x" in h.table("a")
    assert "x" not in h.table("b")
    assert h.submit("b", [Operation.of("lineWidth", ["#ref:x"])])[0].success is False
    assert sorted(h.surface_ids) == ["a", "b"]


def test_reregister_discards_previous_references(host: SurfaceHost) -> None:
    host.submit("canvas", [Operation.of("addRef", ["x", 1])])
    host.register("canvas", RecordingSurface())
    assert "x" not in host.table("canvas")


class _SlowSurface(RecordingSurface):
    def __init__(self) -> None:
        super().__init__()
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def fill(self) -> None:
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.005)
        super().fill()
        with self._guard:
            self.active -= 1


@pytest.mark.integration
def test_one_surface_drains_one_queue_at_a_time() -> None:
    h = SurfaceHost(policy=DrainPolicy.CONTINUE)
    s = _SlowSurface()
    h.register("slow", s)
    ops = [Operation.of("fill")] * 5
    threads = [threading.Thread(target=h.submit, args=("slow", ops)) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert s.max_active == 1
    assert s.call_names() == ["fill"] * 20


@pytest.mark.integration
def test_reregister_waits_for_in_flight_drain_before_clearing() -> None:
    h = SurfaceHost(policy=DrainPolicy.CONTINUE)
    entered = threading.Event()
    release = threading.Event()

    class _Blocking(RecordingSurface):
        def fill(self) -> None:
            entered.set()
            release.wait(5)
            super().fill()

    h.register("s", _Blocking())
    results: list = []
    ops = [
        Operation.of("addRef", ["x", 1]),
        Operation.of("fill"),
        Operation.of("lineWidth", ["#ref:x"]),
    ]
    t = threading.Thread(target=lambda: results.extend(h.submit("s", ops)))
    t.start()
    assert entered.wait(5)
    old_table = h.table("s")
    r = threading.Thread(target=h.register, args=("s", RecordingSurface()))
    r.start()
    r.join(0.05)
    assert r.is_alive()  # 旧テーブルのロック待ち
    assert "x" in old_table
    release.set()
    t.join(5)
    r.join(5)
    assert [res.success for res in results] == [True, True, True]
    assert "x" not in old_table
    assert "x" not in h.table("s")
