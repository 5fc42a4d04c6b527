"""
どこで: `api.histogram`（ライブヒストグラム）。
何を: 行指向入力の数値を取り込み、統計（平均/中央値/標準偏差）と等幅バケットを計算して棒グラフを描く `Histogram`。
なぜ: サーフェス生成物（グラデーション）を `capture_as` で捕捉し、後続サイクルで `#ref:` として
      再利用する流れ、および `addRef` + `#spreadRef:` による定数引数の共有を示すため。

バケット:
- 範囲は min/max 指定があればそれ、なければデータの最小/最大。
- 指定範囲外の値は端のバケットへ丸める。右端ちょうどの値は最後のバケットに入る。
- 高さはカウント最大のバケットを 20 とする整数正規化。
- 範囲幅が 0（全値同一）の場合は全値を先頭バケットへ入れる。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from engine.canvas.queue import OperationQueue
from engine.canvas.resolver import ref, spread_ref
from engine.io.ingest import DataIngestWorker
from engine.runtime.component import Cleanup, Component, RenderContext
from engine.runtime.loop import RenderLoop

logger = logging.getLogger(__name__)

MIN_BUCKETS = 2
MAX_BUCKETS = 100
DEFAULT_BUCKETS = 10
MAX_HEIGHT = 20
BAR_PX_PER_HEIGHT = 8

ERROR_COLOR = "#ff5555"

GRADIENT_REF = "hist.barFill"
FRAME_REF = "hist.frame"


@dataclass(frozen=True)
class HistogramBucket:
    start: float
    end: float
    count: int
    height: int


def validate_num_buckets(n: int) -> int:
    if not MIN_BUCKETS <= int(n) <= MAX_BUCKETS:
        raise ValueError(f"number of buckets must be within {MIN_BUCKETS}..{MAX_BUCKETS}, got {n}")
    return int(n)


def calc_stats(values: Sequence[float]) -> tuple[float, float, float]:
    """(平均, 中央値, 母標準偏差)。空なら (0, 0, 0)。"""
    if len(values) == 0:
        return 0.0, 0.0, 0.0
    v = np.asarray(values, dtype=float)
    return float(v.mean()), float(np.median(v)), float(v.std())


def build_buckets(
    values: Sequence[float],
    num_buckets: int,
    min_value: float | None = None,
    max_value: float | None = None,
) -> list[HistogramBucket]:
    """等幅バケットを作って値を数える。"""
    num_buckets = validate_num_buckets(num_buckets)
    if len(values) == 0:
        return []
    v = np.asarray(values, dtype=float)
    lo = float(v.min()) if min_value is None else float(min_value)
    hi = float(v.max()) if max_value is None else float(max_value)
    if hi < lo:
        raise ValueError(f"max value {hi} is below min value {lo}")

    clamped = v
    if min_value is not None:
        clamped = np.maximum(clamped, lo)
    if max_value is not None:
        clamped = np.minimum(clamped, hi)

    size = (hi - lo) / num_buckets
    if size > 0:
        idx = ((clamped - lo) / size).astype(int)
        idx = np.minimum(idx, num_buckets - 1)
        idx = idx[idx >= 0]
    else:
        idx = np.zeros(clamped.size, dtype=int)
    counts = np.bincount(idx, minlength=num_buckets)

    max_count = int(counts.max()) if counts.size else 0
    buckets: list[HistogramBucket] = []
    for i, c in enumerate(counts.tolist()):
        start = lo + i * size
        height = (c * MAX_HEIGHT) // max_count if max_count > 0 else 0
        buckets.append(HistogramBucket(start=start, end=start + size, count=c, height=height))
    return buckets


def stats_line(values: Sequence[float]) -> str:
    if len(values) == 0:
        return "Waiting for data..."
    v = np.asarray(values, dtype=float)
    mean, median, stddev = calc_stats(values)
    return (
        f"Count: {len(values)} | Range: {v.min():.2f} - {v.max():.2f}"
        f" | Mean: {mean:.2f} | Median: {median:.2f} | StdDev: {stddev:.2f}"
    )


@dataclass(frozen=True)
class HistogramLayout:
    width: int = 800
    height: int = 320
    padding: int = 40


def build_histogram_ops(
    q: OperationQueue,
    values: Sequence[float],
    buckets: Sequence[HistogramBucket],
    layout: HistogramLayout,
    *,
    refs_ready: bool,
    range_max: float | None = None,
    status: str | None = None,
) -> None:
    """1 フレームぶんのヒストグラム描画操作を積む。

    `refs_ready` が False のときはグラデーションとフレーム矩形を先に作って参照テーブルへ捕捉する。
    `status` があれば統計行の下に赤字で出す（入力エラー等）。
    """
    w, h, p = layout.width, layout.height, layout.padding
    base_y = h - p
    top_y = base_y - MAX_HEIGHT * BAR_PX_PER_HEIGHT
    if not refs_ready:
        q.append("createLinearGradient", [0, top_y, 0, base_y], capture_as=GRADIENT_REF)
        q.append("addColorStop", [ref(GRADIENT_REF), 0, "#66aaff"])
        q.append("addColorStop", [ref(GRADIENT_REF), 1, "#1b3a73"])
        q.add_ref(FRAME_REF, [p, top_y, w - 2 * p, base_y - top_y])

    q.append("clearRect", [0, 0, w, h])
    q.append("font", ["13px monospace"])
    q.append("fillStyle", ["#cccccc"])
    q.append("fillText", [stats_line(values), p, 20])
    if status:
        q.append("fillStyle", [ERROR_COLOR])
        q.append("fillText", [status, p, 38])
    if not buckets:
        return

    q.append("strokeStyle", ["#444444"])
    q.append("lineWidth", [1])
    q.append("strokeRect", [spread_ref(FRAME_REF)])

    col_w = (w - 2 * p) / len(buckets)
    for i, b in enumerate(buckets):
        x = p + i * col_w
        if b.count == 0:
            q.append("fillStyle", ["#333333"])
            q.append("fillRect", [x + 1, base_y - 1, col_w - 2, 1])
        else:
            bar_h = b.height * BAR_PX_PER_HEIGHT
            q.append("fillStyle", [ref(GRADIENT_REF)])
            q.append("fillRect", [x + 1, base_y - bar_h, col_w - 2, bar_h])
        q.append("fillStyle", ["#999999"])
        q.append("fillText", [f"{b.start:.1f}", x, base_y + 16])
    final = buckets[-1].end if range_max is None else range_max
    q.append("fillText", [f"{final:.1f}", w - p, base_y + 16])


class Histogram(Component):
    """入力ストリームの数値分布をライブで描くヒストグラム。"""

    def __init__(
        self,
        source: Iterable[str],
        *,
        num_buckets: int = DEFAULT_BUCKETS,
        min_value: float | None = None,
        max_value: float | None = None,
        surface_id: str = "histogram",
        layout: HistogramLayout | None = None,
    ) -> None:
        self.surface_id = surface_id
        self.layout = layout or HistogramLayout()
        self._source = source
        self._initial = (validate_num_buckets(num_buckets), min_value, max_value)
        self._drawn: tuple[int, int, int] | None = None
        self.worker: DataIngestWorker | None = None

    def setup(self, loop: RenderLoop) -> Cleanup:
        self._signal = loop.signal
        self._values = loop.create_cell([], name=f"{self.surface_id}.values")
        # (num_buckets, min, max)
        self._controls = loop.create_cell(self._initial, name=f"{self.surface_id}.controls")
        self._status = loop.create_cell(None, name=f"{self.surface_id}.status")
        signal = loop.signal

        def on_error(message: str) -> None:
            self._status.update(lambda _old: message)
            signal.request()

        self.worker = DataIngestWorker(
            self._source,
            self._values,
            signal.request,
            on_error=on_error,
            name=f"{self.surface_id}-ingest",
        )
        self.worker.start()
        return self.worker.stop

    # ---- controls（任意スレッドから呼べる） ----
    def set_num_buckets(self, n: int) -> None:
        """範囲外（2..100 以外）は既定の 10 に戻す。"""
        try:
            n = validate_num_buckets(n)
        except ValueError:
            n = DEFAULT_BUCKETS
        self._controls.update(lambda c: (n, c[1], c[2]))
        self._signal.request()

    def set_min_value(self, value: float | None) -> None:
        self._controls.update(lambda c: (c[0], value, c[2]))
        self._signal.request()

    def set_max_value(self, value: float | None) -> None:
        self._controls.update(lambda c: (c[0], c[1], value))
        self._signal.request()

    @property
    def values(self) -> list[float]:
        return list(self._values.get())

    @property
    def controls(self) -> tuple[int, float | None, float | None]:
        return self._controls.get()

    def render(self, ctx: RenderContext) -> None:
        if not ctx.has_surface(self.surface_id):
            return
        key = (self._values.version, self._controls.version, self._status.version)
        if key == self._drawn:
            return
        self._drawn = key
        values = self._values.get()
        num_buckets, lo, hi = self._controls.get()
        try:
            buckets = build_buckets(values, num_buckets, lo, hi)
        except ValueError as e:
            logger.warning("histogram range rejected: %s", e)
            buckets = []
        refs_ready = ctx.has_ref(self.surface_id, GRADIENT_REF) and ctx.has_ref(
            self.surface_id, FRAME_REF
        )
        build_histogram_ops(
            ctx.queue(self.surface_id),
            values,
            buckets,
            self.layout,
            refs_ready=refs_ready,
            range_max=hi,
            status=self._status.get(),
        )


__all__ = [
    "DEFAULT_BUCKETS",
    "FRAME_REF",
    "GRADIENT_REF",
    "Histogram",
    "HistogramBucket",
    "HistogramLayout",
    "build_buckets",
    "build_histogram_ops",
    "calc_stats",
    "stats_line",
    "validate_num_buckets",
]
