"""
どこで: `engine.canvas` のサーフェス境界。
何を: 名前付きプリミティブを公開する描画対象の Protocol と、呼び出しを記録するだけの
      `RecordingSurface`（テスト/ヘッドレス実行用）、不透明な `Gradient` ハンドル。
なぜ: キュー/参照の契約を実際の描画セマンティクスから切り離して検証・再利用するため。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Protocol, runtime_checkable

# キャンバス 2D 相当のプリミティブ名（操作名の名前空間）
CANVAS_PRIMITIVES = frozenset(
    {
        "clearRect",
        "fillRect",
        "strokeRect",
        "beginPath",
        "closePath",
        "moveTo",
        "lineTo",
        "arc",
        "stroke",
        "fill",
        "fillStyle",
        "strokeStyle",
        "lineWidth",
        "font",
        "fillText",
        "createLinearGradient",
        "addColorStop",
    }
)

_gradient_ids = count(1)


@runtime_checkable
class Surface(Protocol):
    """外部の状態付き描画対象。`primitives` に含まれる名前のメソッドを持つ。"""

    primitives: frozenset[str]


@dataclass(eq=False)
class Gradient:
    """サーフェスが生成する不透明ハンドル。シリアライズ境界は越えない前提。"""

    x0: float
    y0: float
    x1: float
    y1: float
    stops: list[tuple[float, Any]] = field(default_factory=list)
    handle_id: int = field(default_factory=lambda: next(_gradient_ids))

    def add_color_stop(self, offset: float, color: Any) -> None:
        offset = float(offset)
        if not 0.0 <= offset <= 1.0:
            raise ValueError(f"color stop offset must be within [0, 1], got {offset}")
        self.stops.append((offset, color))
        self.stops.sort(key=lambda s: s[0])

    def __repr__(self) -> str:
        return f"<Gradient #{self.handle_id} stops={len(self.stops)}>"


class RecordingSurface:
    """プリミティブ呼び出しを `(name, params)` として記録するサーフェス。

    - スタイル系（fillStyle/strokeStyle/lineWidth/font）は現在値も保持する。
    - `createLinearGradient` は `Gradient` ハンドルを返す（参照テーブルで捕捉する想定）。
    """

    primitives = CANVAS_PRIMITIVES

    def __init__(self, width: int = 300, height: int = 150) -> None:
        self.width = int(width)
        self.height = int(height)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.state: dict[str, Any] = {
            "fillStyle": "#000000",
            "strokeStyle": "#000000",
            "lineWidth": 1.0,
            "font": "10px sans-serif",
        }

    def _record(self, name: str, *params: Any) -> None:
        self.calls.append((name, params))

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def reset(self) -> None:
        self.calls.clear()

    # ---- 矩形 ----
    def clearRect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("clearRect", x, y, w, h)

    def fillRect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("fillRect", x, y, w, h)

    def strokeRect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("strokeRect", x, y, w, h)

    # ---- パス ----
    def beginPath(self) -> None:
        self._record("beginPath")

    def closePath(self) -> None:
        self._record("closePath")

    def moveTo(self, x: float, y: float) -> None:
        self._record("moveTo", x, y)

    def lineTo(self, x: float, y: float) -> None:
        self._record("lineTo", x, y)

    def arc(
        self, x: float, y: float, r: float, start: float, end: float, ccw: bool | None = None
    ) -> None:
        if r < 0:
            raise ValueError(f"negative radius: {r}")
        if ccw is None:
            self._record("arc", x, y, r, start, end)
        else:
            self._record("arc", x, y, r, start, end, ccw)

    def stroke(self) -> None:
        self._record("stroke")

    def fill(self) -> None:
        self._record("fill")

    # ---- スタイル ----
    def fillStyle(self, value: Any) -> None:
        self.state["fillStyle"] = value
        self._record("fillStyle", value)

    def strokeStyle(self, value: Any) -> None:
        self.state["strokeStyle"] = value
        self._record("strokeStyle", value)

    def lineWidth(self, value: float) -> None:
        self.state["lineWidth"] = float(value)
        self._record("lineWidth", value)

    def font(self, value: str) -> None:
        self.state["font"] = value
        self._record("font", value)

    def fillText(self, text: str, x: float, y: float) -> None:
        self._record("fillText", text, x, y)

    # ---- 不透明ハンドル ----
    def createLinearGradient(self, x0: float, y0: float, x1: float, y1: float) -> Gradient:
        g = Gradient(float(x0), float(y0), float(x1), float(y1))
        self._record("createLinearGradient", x0, y0, x1, y1)
        return g

    def addColorStop(self, gradient: Gradient, offset: float, color: Any) -> None:
        if not isinstance(gradient, Gradient):
            raise TypeError(f"addColorStop expects a Gradient, got {type(gradient).__name__}")
        gradient.add_color_stop(offset, color)
        self._record("addColorStop", gradient, offset, color)


__all__ = ["CANVAS_PRIMITIVES", "Surface", "Gradient", "RecordingSurface"]
