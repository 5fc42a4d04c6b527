"""
どこで: `engine.runtime` のコンポーネント契約。
何を: 描画ループにマウントされる `Component`（setup/cleanup のエフェクトと render）と、
      1 サイクルぶんの文脈 `RenderContext`（描画ティックとサーフェスごとの操作キュー）。
なぜ: 更新ロジックは描画面を直接触らず、キューを積むだけにするため。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from engine.canvas.queue import OperationQueue

if TYPE_CHECKING:  # pragma: no cover
    from .loop import RenderLoop

Cleanup = Callable[[], None]


class RenderContext:
    """1 回の描画サイクルの文脈。キューはサーフェスごとに 1 つ、サイクル終了時にドレインされる。"""

    def __init__(self, loop: "RenderLoop", tick: int) -> None:
        self._loop = loop
        self.tick = tick
        self._queues: dict[str, OperationQueue] = {}

    def queue(self, surface_id: str) -> OperationQueue:
        """このサイクルで `surface_id` 向けに積むキューを返す（同じ id なら同じキュー）。"""
        q = self._queues.get(surface_id)
        if q is None:
            q = OperationQueue()
            self._queues[surface_id] = q
        return q

    def has_surface(self, surface_id: str) -> bool:
        return self._loop.host.has_surface(surface_id)

    def has_ref(self, surface_id: str, ref_id: str) -> bool:
        """前サイクルまでに `surface_id` の参照テーブルへ捕捉済みか（値は解決しない）。"""
        if not self.has_surface(surface_id):
            return False
        return ref_id in self._loop.host.table(surface_id)

    def request_render(self) -> None:
        self._loop.signal.request()

    @property
    def queues(self) -> dict[str, OperationQueue]:
        return dict(self._queues)


class Component(ABC):
    """描画ループにマウントされる更新単位。"""

    #: 既定で描画するサーフェス id
    surface_id: str = "canvas"

    def setup(self, loop: "RenderLoop") -> Cleanup | None:
        """マウント時に 1 度だけ呼ばれる。戻り値の関数はアンマウント時に呼ばれる。"""
        return None

    @abstractmethod
    def render(self, ctx: RenderContext) -> None:
        """状態を読み、`ctx.queue(...)` へ描画操作を積む。"""


__all__ = ["Cleanup", "Component", "RenderContext"]
