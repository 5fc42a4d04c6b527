"""
どこで: `api.graph`（ライブデータグラフ）。
何を: 行指向入力から数値を取り込み、格子・軸・折れ線・点マーカー・統計行を描画操作として積む `LiveGraph`。
なぜ: 取り込みワーカ → 状態セル → 描画要求 → キュー構築 → ドレインの一連の流れを最小構成で示すため。

描画:
- 縦横 10 本の格子、左/下の軸、値の折れ線と半径 `point_radius` の点。
- Y 方向は最大値の 1.05 倍でスケール（最大値が 0 以下なら 1.0 を使う）。
- 下端に "Points: N   Average: A"。入力エラー時は赤字でメッセージを出す。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from engine.canvas.queue import OperationQueue
from engine.io.ingest import DataIngestWorker
from engine.runtime.component import Cleanup, Component, RenderContext
from engine.runtime.loop import RenderLoop

logger = logging.getLogger(__name__)

GRID_LINES = 10
GRID_COLOR = "#333333"
AXIS_COLOR = "#666666"
LINE_COLOR = "#4488ff"
TEXT_COLOR = "#cccccc"
ERROR_COLOR = "#ff5555"


@dataclass(frozen=True)
class GraphLayout:
    width: int = 800
    height: int = 400
    padding: int = 40
    point_radius: float = 3


def graph_stats(values: Sequence[float]) -> tuple[int, float]:
    """(件数, 平均)。空なら (0, 0.0)。"""
    if len(values) == 0:
        return 0, 0.0
    return len(values), float(np.mean(np.asarray(values, dtype=float)))


def _grid_ops(q: OperationQueue, layout: GraphLayout) -> None:
    w, h, p = layout.width, layout.height, layout.padding
    q.append("strokeStyle", [GRID_COLOR])
    q.append("lineWidth", [1])
    step = GRID_LINES - 1
    for i in range(GRID_LINES):
        x = p + i * (w - 2 * p) / step
        q.append("beginPath")
        q.append("moveTo", [x, p])
        q.append("lineTo", [x, h - p])
        q.append("stroke")
    for i in range(GRID_LINES):
        y = p + i * (h - 2 * p) / step
        q.append("beginPath")
        q.append("moveTo", [p, y])
        q.append("lineTo", [w - p, y])
        q.append("stroke")


def _axes_ops(q: OperationQueue, layout: GraphLayout) -> None:
    w, h, p = layout.width, layout.height, layout.padding
    q.append("beginPath")
    q.append("strokeStyle", [AXIS_COLOR])
    q.append("lineWidth", [2])
    q.append("moveTo", [p, p])
    q.append("lineTo", [p, h - p])
    q.append("moveTo", [p, h - p])
    q.append("lineTo", [w - p, h - p])
    q.append("stroke")


def point_coords(values: Sequence[float], layout: GraphLayout) -> np.ndarray:
    """値列をキャンバス座標 (N, 2) へ写す。"""
    v = np.asarray(values, dtype=float)
    if v.size == 0:
        return np.zeros((0, 2), dtype=float)
    max_val = float(v.max()) * 1.05
    if max_val <= 0:
        max_val = 1.0
    w, h, p = layout.width, layout.height, layout.padding
    x_scale = (w - 2 * p) / max(v.size - 1, 1)
    y_scale = (h - 2 * p) / max_val
    xs = p + np.arange(v.size) * x_scale
    ys = h - p - v * y_scale
    return np.stack([xs, ys], axis=1)


def build_graph_ops(
    q: OperationQueue,
    values: Sequence[float],
    layout: GraphLayout,
    *,
    status: str | None = None,
) -> None:
    """1 フレームぶんのグラフ描画操作を `q` に積む（値が空なら統計/ステータスのみ）。"""
    q.append("clearRect", [0, 0, layout.width, layout.height])
    if len(values) > 0:
        _grid_ops(q, layout)
        _axes_ops(q, layout)
        pts = point_coords(values, layout)

        q.append("beginPath")
        q.append("strokeStyle", [LINE_COLOR])
        q.append("lineWidth", [2])
        for i, (x, y) in enumerate(pts):
            q.append("moveTo" if i == 0 else "lineTo", [float(x), float(y)])
        q.append("stroke")

        for x, y in pts:
            q.append("beginPath")
            q.append("fillStyle", [LINE_COLOR])
            q.append("arc", [float(x), float(y), layout.point_radius, 0, 2 * math.pi])
            q.append("fill")

    count, avg = graph_stats(values)
    q.append("font", ["14px monospace"])
    q.append("fillStyle", [TEXT_COLOR])
    q.append("fillText", [f"Points: {count}   Average: {avg:.2f}", layout.padding, layout.height - 12])
    if status:
        q.append("fillStyle", [ERROR_COLOR])
        q.append("fillText", [status, layout.padding, 24])


class LiveGraph(Component):
    """入力ストリームの数値をライブで描くグラフ。"""

    def __init__(
        self,
        source: Iterable[str],
        *,
        surface_id: str = "graph",
        layout: GraphLayout | None = None,
    ) -> None:
        self.surface_id = surface_id
        self.layout = layout or GraphLayout()
        self._source = source
        self._drawn: tuple[int, int] | None = None
        self.worker: DataIngestWorker | None = None

    def setup(self, loop: RenderLoop) -> Cleanup:
        self._points = loop.create_cell([], name=f"{self.surface_id}.points")
        self._status = loop.create_cell(None, name=f"{self.surface_id}.status")
        signal = loop.signal

        def on_error(message: str) -> None:
            self._status.update(lambda _old: message)
            signal.request()

        self.worker = DataIngestWorker(
            self._source,
            self._points,
            signal.request,
            on_error=on_error,
            name=f"{self.surface_id}-ingest",
        )
        self.worker.start()
        return self.worker.stop

    @property
    def values(self) -> list[float]:
        return list(self._points.get())

    def render(self, ctx: RenderContext) -> None:
        if not ctx.has_surface(self.surface_id):
            return
        key = (self._points.version, self._status.version)
        if key == self._drawn:
            return
        self._drawn = key
        build_graph_ops(
            ctx.queue(self.surface_id),
            self._points.get(),
            self.layout,
            status=self._status.get(),
        )


__all__ = ["GraphLayout", "LiveGraph", "build_graph_ops", "graph_stats", "point_coords"]
