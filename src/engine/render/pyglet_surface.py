"""
どこで: `engine.render` のサーフェス実装。
何を: キャンバス 2D 相当のプリミティブ名を `pyglet.shapes`/`pyglet.text` へ写し、1 つの Batch に積む
      `PygletCanvasSurface`。座標はキャンバス系（原点左上・Y 下向き）で受け、内部で反転する。
なぜ: 操作キューのドレイン先として実ウィンドウでのプレビューを提供するため（描画忠実度は best-effort）。

制限:
- グラデーションは中間色（offset=0.5 の補間色）の単色で近似する。
- 部分 `clearRect` は背景色の矩形で上書きする。全面 `clearRect` で形状を破棄する。
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

import pyglet

from engine.canvas.surface import CANVAS_PRIMITIVES, Gradient
from util.color import mix_u8, to_u8_rgba

logger = logging.getLogger(__name__)

_FONT_RE = re.compile(r"(\d+(?:\.\d+)?)px\s+(.+)")
_ARC_SEGMENT_RAD = math.pi / 24

RGBA8 = tuple[int, int, int, int]


def _gradient_color(g: Gradient, t: float = 0.5) -> RGBA8:
    if not g.stops:
        return (0, 0, 0, 0)
    stops = [(off, to_u8_rgba(c)) for off, c in g.stops]
    if t <= stops[0][0]:
        return stops[0][1]
    for (o0, c0), (o1, c1) in zip(stops, stops[1:]):
        if o0 <= t <= o1:
            span = o1 - o0
            return mix_u8(c0, c1, 0.0 if span <= 0 else (t - o0) / span)
    return stops[-1][1]


class PygletCanvasSurface:
    """pyglet の Batch へ描画するキャンバスサーフェス。"""

    primitives = CANVAS_PRIMITIVES

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: object = (0, 0, 0, 0),
    ) -> None:
        self.width = int(width)
        self.height = int(height)
        self._background = to_u8_rgba(background)
        self._batch = pyglet.graphics.Batch()
        self._shapes: list[Any] = []
        self._fill: RGBA8 = (0, 0, 0, 255)
        self._stroke: RGBA8 = (0, 0, 0, 255)
        self._line_width = 1.0
        self._font_size = 10.0
        self._font_name: str | None = None
        # パス: サブパスごとの点列（キャンバス座標）と、塗り用の円弧
        self._subpaths: list[list[tuple[float, float]]] = []
        self._arcs: list[tuple[float, float, float, float, float]] = []

    # ---- helpers ----
    def _fy(self, y: float) -> float:
        return self.height - float(y)

    def _keep(self, shape: Any) -> None:
        self._shapes.append(shape)

    @staticmethod
    def _style_color(value: Any) -> RGBA8:
        if isinstance(value, Gradient):
            return _gradient_color(value)
        return to_u8_rgba(value)

    def draw(self) -> None:
        """ウィンドウの on_draw から呼ぶ。"""
        self._batch.draw()

    @property
    def shape_count(self) -> int:
        return len(self._shapes)

    # ---- 矩形 ----
    def clearRect(self, x: float, y: float, w: float, h: float) -> None:
        if x <= 0 and y <= 0 and x + w >= self.width and y + h >= self.height:
            for s in self._shapes:
                s.delete()
            self._shapes.clear()
            return
        self._keep(
            pyglet.shapes.Rectangle(
                x, self._fy(y) - h, w, h, color=self._background, batch=self._batch
            )
        )

    def fillRect(self, x: float, y: float, w: float, h: float) -> None:
        self._keep(
            pyglet.shapes.Rectangle(x, self._fy(y) - h, w, h, color=self._fill, batch=self._batch)
        )

    def strokeRect(self, x: float, y: float, w: float, h: float) -> None:
        corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]
        self._stroke_points(corners)

    # ---- パス ----
    def beginPath(self) -> None:
        self._subpaths = []
        self._arcs = []

    def closePath(self) -> None:
        if self._subpaths and len(self._subpaths[-1]) > 1:
            self._subpaths[-1].append(self._subpaths[-1][0])

    def moveTo(self, x: float, y: float) -> None:
        self._subpaths.append([(float(x), float(y))])

    def lineTo(self, x: float, y: float) -> None:
        if not self._subpaths:
            self._subpaths.append([])
        self._subpaths[-1].append((float(x), float(y)))

    def arc(
        self, x: float, y: float, r: float, start: float, end: float, ccw: bool = False
    ) -> None:
        if r < 0:
            raise ValueError(f"negative radius: {r}")
        sweep = end - start
        if ccw:
            sweep = -((start - end) % (2 * math.pi) or 2 * math.pi)
        n = max(2, int(abs(sweep) / _ARC_SEGMENT_RAD) + 1)
        pts = [
            (x + r * math.cos(start + sweep * i / (n - 1)), y + r * math.sin(start + sweep * i / (n - 1)))
            for i in range(n)
        ]
        if not self._subpaths:
            self._subpaths.append([])
        self._subpaths[-1].extend(pts)
        self._arcs.append((float(x), float(y), float(r), float(start), float(sweep)))

    def _stroke_points(self, pts: list[tuple[float, float]]) -> None:
        for (x0, y0), (x1, y1) in zip(pts, pts[1:]):
            self._keep(
                pyglet.shapes.Line(
                    x0,
                    self._fy(y0),
                    x1,
                    self._fy(y1),
                    self._line_width,
                    color=self._stroke,
                    batch=self._batch,
                )
            )

    def stroke(self) -> None:
        for sub in self._subpaths:
            self._stroke_points(sub)

    def fill(self) -> None:
        for cx, cy, r, _start, sweep in self._arcs:
            if abs(sweep) >= 2 * math.pi - 1e-3:
                self._keep(
                    pyglet.shapes.Circle(cx, self._fy(cy), r, color=self._fill, batch=self._batch)
                )
        if self._arcs:
            return
        for sub in self._subpaths:
            if len(sub) < 3:
                continue
            coords = [(px, self._fy(py)) for px, py in sub]
            self._keep(pyglet.shapes.Polygon(*coords, color=self._fill, batch=self._batch))

    # ---- スタイル ----
    def fillStyle(self, value: Any) -> None:
        self._fill = self._style_color(value)

    def strokeStyle(self, value: Any) -> None:
        self._stroke = self._style_color(value)

    def lineWidth(self, value: float) -> None:
        self._line_width = max(0.0, float(value))

    def font(self, value: str) -> None:
        m = _FONT_RE.search(value)
        if m is None:
            raise ValueError(f"unsupported font spec: {value!r}")
        self._font_size = float(m.group(1))
        family = m.group(2).split(",")[0].strip().strip("'\"")
        self._font_name = None if family in {"sans-serif", "serif", "monospace"} else family

    def fillText(self, text: str, x: float, y: float) -> None:
        self._keep(
            pyglet.text.Label(
                str(text),
                font_name=self._font_name,
                font_size=self._font_size * 0.75,  # px → pt
                x=x,
                y=self._fy(y),
                color=self._fill,
                batch=self._batch,
            )
        )

    # ---- 不透明ハンドル ----
    def createLinearGradient(self, x0: float, y0: float, x1: float, y1: float) -> Gradient:
        return Gradient(float(x0), float(y0), float(x1), float(y1))

    def addColorStop(self, gradient: Gradient, offset: float, color: Any) -> None:
        if not isinstance(gradient, Gradient):
            raise TypeError(f"addColorStop expects a Gradient, got {type(gradient).__name__}")
        to_u8_rgba(color)  # 不正な色はここで ValueError
        gradient.add_color_stop(offset, color)


__all__ = ["PygletCanvasSurface"]
