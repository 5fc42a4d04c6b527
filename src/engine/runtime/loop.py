"""
どこで: `engine.runtime` の描画ループ。
何を: 描画要求があった `tick(dt)` で 1 サイクルを実行する `RenderLoop`。
      サイクル = 描画ティック算出 → 状態セルの保留変換を適用 → 各コンポーネントの render →
      サーフェスごとのキューを `SurfaceHost` へ投入 → 失敗をログ。
なぜ: 更新/ドレインを単一スレッド・非再入で直列化し、バックグラウンドからは状態セルと
      描画要求シグナルの 2 経路だけで入ってこられるようにするため。

描画ティック:
- ループ開始からの経過ミリ秒（int）。時計が戻っても前回値を下回らない（単調増加）。
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from engine.canvas.host import SurfaceHost
from engine.canvas.queue import OpResult
from engine.core.state import SharedStateCell

from ..core.tickable import Tickable
from .component import Cleanup, Component, RenderContext
from .signal import RenderSignal

logger = logging.getLogger(__name__)


class RenderLoop(Tickable):
    """コンポーネントのマウント/描画サイクル/キュー投入を担う。"""

    def __init__(
        self,
        host: SurfaceHost | None = None,
        *,
        signal: RenderSignal | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.host = host if host is not None else SurfaceHost()
        self.signal = signal if signal is not None else RenderSignal()
        self._clock = clock
        self._start = clock()
        self._last_tick = 0
        self._cells: list[SharedStateCell] = []
        self._mounted: list[tuple[Component, Cleanup | None]] = []
        self._cycle_lock = threading.Lock()
        self._cycles = 0
        self._failures = 0
        self.last_results: dict[str, list[OpResult]] = {}
        # 冪等な close() のための内部フラグ
        self._closed = False

    # -------- state --------
    def create_cell(self, initial: Any, *, name: str | None = None) -> SharedStateCell:
        """このループが所有する状態セルを作る（各サイクル先頭で保留変換が適用される）。"""
        cell = SharedStateCell(initial, name=name)
        self._cells.append(cell)
        return cell

    def current_tick(self) -> int:
        now = int((self._clock() - self._start) * 1000)
        if now < self._last_tick:
            now = self._last_tick
        self._last_tick = now
        return now

    # -------- components --------
    def mount(self, component: Component) -> None:
        """setup（エフェクト）を実行してマウントし、初回描画を要求する。"""
        if self._closed:
            raise RuntimeError("render loop is closed")
        cleanup = component.setup(self)
        self._mounted.append((component, cleanup))
        self.signal.request()

    def unmount(self, component: Component) -> None:
        for i, (c, cleanup) in enumerate(self._mounted):
            if c is component:
                del self._mounted[i]
                if cleanup is not None:
                    cleanup()
                return

    @property
    def components(self) -> list[Component]:
        return [c for c, _ in self._mounted]

    # -------- Tickable interface --------
    def tick(self, dt: float) -> None:
        """描画要求が立っていれば 1 サイクル実行する。"""
        if self._closed:
            return
        if self.signal.consume():
            self.run_cycle()

    def run_cycle(self) -> dict[str, list[OpResult]]:
        """1 サイクルを実行し、サーフェスごとの結果を返す。再入は `RuntimeError`。"""
        if not self._cycle_lock.acquire(blocking=False):
            raise RuntimeError("render cycle already in progress")
        try:
            ctx = RenderContext(self, self.current_tick())
            for cell in self._cells:
                cell.apply_pending()
            for component in self.components:
                component.render(ctx)
            results: dict[str, list[OpResult]] = {}
            for surface_id, queue in ctx.queues.items():
                if len(queue) == 0:
                    continue
                results[surface_id] = self.host.submit(surface_id, queue)
                self._report(surface_id, results[surface_id])
            self._cycles += 1
            self.last_results = results
            return results
        finally:
            self._cycle_lock.release()

    def _report(self, surface_id: str, results: list[OpResult]) -> None:
        for r in results:
            if r.success or r.error is None:
                continue
            self._failures += 1
            logger.warning("surface=%s %s: %s", surface_id, r.error.kind, r.error)

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def failures(self) -> int:
        """これまでに報告された操作失敗の累計。"""
        return self._failures

    # --------- lifecycle ---------
    def close(self) -> None:
        """全コンポーネントを逆順にアンマウントし、サーフェスを退役させる（多重呼び出しに安全）。"""
        if self._closed:
            return
        # 以降の例外で途中離脱しても、次回は no-op になるよう先にフラグを立てる
        self._closed = True
        try:
            for component, cleanup in reversed(self._mounted):
                if cleanup is None:
                    continue
                try:
                    cleanup()
                except Exception:
                    logger.exception("cleanup failed for %r", component)
        finally:
            self._mounted.clear()
            self.host.close()


__all__ = ["RenderLoop"]
