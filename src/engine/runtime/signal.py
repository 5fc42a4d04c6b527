"""
どこで: `engine.runtime` の描画要求チャネル。
何を: 任意スレッドから立てられ、描画ループが 1 度だけ消費する「描画して」フラグ `RenderSignal`。
なぜ: バックグラウンド（取り込み/起床タイマ）から描画ループへの通知を、UI 所有構造に触れない
      細い 1 本の経路に限定するため。
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class RenderSignal:
    """スレッド安全な描画要求フラグ（複数回の要求は 1 回の描画に畳み込まれる）。"""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []
        self._requests = 0

    def request(self) -> None:
        """描画を要求する（任意スレッドから呼べる）。"""
        with self._lock:
            self._requests += 1
            listeners = list(self._listeners)
        self._event.set()
        for fn in listeners:
            try:
                fn()
            except Exception:
                logger.exception("render request listener failed")

    def consume(self) -> bool:
        """要求が立っていれば下ろして True を返す（描画ループ専用）。"""
        with self._lock:
            if not self._event.is_set():
                return False
            self._event.clear()
            return True

    def wait(self, timeout: float | None = None) -> bool:
        """要求が立つまで待つ（消費はしない）。"""
        return self._event.wait(timeout)

    @property
    def pending(self) -> bool:
        return self._event.is_set()

    @property
    def requests(self) -> int:
        """累計の要求回数（畳み込み前）。"""
        with self._lock:
            return self._requests

    def add_listener(self, fn: Callable[[], None]) -> None:
        """要求時に呼ぶ関数を登録（例: GUI のイベントループを起こす）。"""
        with self._lock:
            self._listeners.append(fn)


__all__ = ["RenderSignal"]
