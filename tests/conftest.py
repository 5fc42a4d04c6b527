"""共通フィクスチャ。

- 記録サーフェス/参照テーブル/サーフェスホスト
- 実時間を使わない手動タイマと手動時計
- 1 行ずつ供給できる行ソース
"""

from __future__ import annotations

import queue
from typing import Callable, Iterator

import pytest

from engine.canvas.host import SurfaceHost
from engine.canvas.queue import DrainPolicy
from engine.canvas.reference_table import ReferenceTable
from engine.canvas.surface import RecordingSurface


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface(300, 300)


@pytest.fixture()
def table() -> ReferenceTable:
    return ReferenceTable()


@pytest.fixture()
def host(surface: RecordingSurface) -> Iterator[SurfaceHost]:
    h = SurfaceHost(policy=DrainPolicy.CONTINUE)
    h.register("canvas", surface)
    yield h
    h.close()


class ManualTimer:
    """`threading.Timer` 互換のダミー。`fire()` で即時実行する。"""

    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.name = ""
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.function()


@pytest.fixture()
def manual_timers() -> Iterator[tuple[Callable[..., ManualTimer], list[ManualTimer]]]:
    timers: list[ManualTimer] = []

    def factory(interval: float, function: Callable[[], None]) -> ManualTimer:
        t = ManualTimer(interval, function)
        timers.append(t)
        return t

    yield factory, timers


class ManualClock:
    """秒単位の手動時計（`advance_ms` でミリ秒進める）。"""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


class LineFeed:
    """キュー経由で 1 行ずつ供給する行ソース。`close()` で終端。"""

    _EOF = object()

    def __init__(self) -> None:
        self._q: "queue.Queue[object]" = queue.Queue()

    def push(self, *lines: str) -> None:
        for line in lines:
            self._q.put(line)

    def close(self) -> None:
        self._q.put(self._EOF)

    def __iter__(self) -> Iterator[str]:
        while True:
            item = self._q.get()
            if item is self._EOF:
                return
            yield item  # type: ignore[misc]


@pytest.fixture()
def line_feed() -> LineFeed:
    return LineFeed()


@pytest.fixture()
def line_feed_factory() -> Callable[[], LineFeed]:
    return LineFeed
