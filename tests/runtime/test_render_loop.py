from __future__ import annotations

import pytest

from engine.canvas.host import SurfaceHost
from engine.canvas.queue import DrainPolicy
from engine.canvas.surface import RecordingSurface
from engine.runtime.component import Component, RenderContext
from engine.runtime.loop import RenderLoop


class _Counter(Component):
    surface_id = "canvas"

    def __init__(self) -> None:
        self.cell = None
        self.cleaned = False
        self.ticks: list[int] = []

    def setup(self, loop: RenderLoop):  # noqa: ANN201
        self.cell = loop.create_cell(0, name="count")

        def cleanup() -> None:
            self.cleaned = True

        return cleanup

    def render(self, ctx: RenderContext) -> None:
        self.ticks.append(ctx.tick)
        q = ctx.queue(self.surface_id)
        q.append("fillText", [str(self.cell.get()), 0, 0])


@pytest.fixture()
def loop(clock, surface: RecordingSurface):  # noqa: ANN001, ANN201
    host = SurfaceHost(policy=DrainPolicy.CONTINUE)
    host.register("canvas", surface)
    lp = RenderLoop(host, clock=clock)
    yield lp
    lp.close()


def test_mount_requests_first_render_and_tick_runs_one_cycle(loop: RenderLoop, surface) -> None:  # noqa: ANN001
    c = _Counter()
    loop.mount(c)
    loop.tick(0.016)
    assert loop.cycles == 1
    assert surface.calls == [("fillText", ("0", 0, 0))]
    # 要求が無ければ描画しない
    loop.tick(0.016)
    assert loop.cycles == 1


def test_cell_updates_are_applied_before_render(loop: RenderLoop, surface) -> None:  # noqa: ANN001
    c = _Counter()
    loop.mount(c)
    c.cell.update(lambda v: v + 1)
    c.cell.update(lambda v: v + 1)
    loop.tick(0.016)
    assert surface.calls[-1] == ("fillText", ("2", 0, 0))


def test_render_tick_is_ms_since_start_and_monotonic(loop: RenderLoop, clock) -> None:  # noqa: ANN001
    c = _Counter()
    loop.mount(c)
    clock.advance_ms(40)
    loop.run_cycle()
    clock.advance_ms(-30)  # 時計の巻き戻り
    loop.run_cycle()
    assert c.ticks == [40, 40]


def test_failed_ops_are_logged_and_counted(loop: RenderLoop, caplog) -> None:  # noqa: ANN001
    class _Bad(Component):
        def render(self, ctx: RenderContext) -> None:
            ctx.queue("canvas").append("fillStyle", ["#ref:none"]).append("fill")

    loop.mount(_Bad())
    with caplog.at_level("WARNING", logger="engine.runtime.loop"):
        results = loop.run_cycle()
    assert [r.success for r in results["canvas"]] == [False, True]
    assert loop.failures == 1
    assert any("ResolutionError" in r.getMessage() for r in caplog.records)


def test_empty_queues_are_not_submitted(loop: RenderLoop) -> None:
    class _Idle(Component):
        def render(self, ctx: RenderContext) -> None:
            ctx.queue("elsewhere")  # 未登録サーフェスでも空なら投入しない

    loop.mount(_Idle())
    assert loop.run_cycle() == {}


def test_reentrant_cycle_is_rejected(loop: RenderLoop) -> None:
    errors: list[Exception] = []

    class _Reenter(Component):
        def render(self, ctx: RenderContext) -> None:
            try:
                loop.run_cycle()
            except RuntimeError as e:
                errors.append(e)

    loop.mount(_Reenter())
    loop.run_cycle()
    assert len(errors) == 1


def test_has_ref_sees_refs_captured_in_previous_cycles(loop: RenderLoop) -> None:
    seen: list[bool] = []

    class _Capture(Component):
        def render(self, ctx: RenderContext) -> None:
            seen.append(ctx.has_ref("canvas", "grad"))
            if not seen[-1]:
                ctx.queue("canvas").append("createLinearGradient", [0, 0, 1, 1], capture_as="grad")

    loop.mount(_Capture())
    loop.run_cycle()
    loop.run_cycle()
    assert seen == [False, True]
    assert not RenderContext(loop, 0).has_ref("missing", "grad")


def test_close_runs_cleanups_in_reverse_and_is_idempotent(loop: RenderLoop) -> None:
    order: list[str] = []

    class _C(Component):
        def __init__(self, name: str) -> None:
            self.name = name

        def setup(self, loop):  # noqa: ANN001, ANN201
            return lambda: order.append(self.name)

        def render(self, ctx: RenderContext) -> None:
            pass

    loop.mount(_C("a"))
    loop.mount(_C("b"))
    loop.close()
    loop.close()
    assert order == ["b", "a"]
    assert loop.host.surface_ids == []
    with pytest.raises(RuntimeError):
        loop.mount(_C("c"))
    loop.tick(0.016)  # close 後は no-op


def test_unmount_runs_cleanup(loop: RenderLoop) -> None:
    c = _Counter()
    loop.mount(c)
    loop.unmount(c)
    assert c.cleaned
    assert loop.components == []
