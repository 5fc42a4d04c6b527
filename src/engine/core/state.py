"""
どこで: `engine.core` の共有状態コンテナ。
何を: 単一オーナー（描画ループ）が保持する値と、任意スレッドから投入される純粋変換関数の待ち行列。
なぜ: バックグラウンドタスクが開始時点の値を捕まえて後から書き戻す（古いクロージャ競合）を防ぎ、
      すべての更新を「適用時点の最新値に対する変換」としてオーナー側で適用するため。

使い方:
    cell = SharedStateCell([])
    cell.update(lambda xs: [*xs, 1.0])   # 任意スレッド（投入のみ）
    cell.apply_pending()                 # オーナーのみ（描画サイクル先頭）
    cell.get()                           # -> [1.0]
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SharedStateCell(Generic[T]):
    """変換関数のみを受け付ける単一オーナーの状態セル。"""

    def __init__(self, initial: T, *, name: str | None = None) -> None:
        self._value: T = initial
        self._pending: deque[Callable[[T], T]] = deque()
        self._lock = threading.Lock()
        self._version = 0
        self.name = name

    # ---- 任意ドメインから ----
    def update(self, fn: Callable[[T], T]) -> None:
        """変換関数を投入する（値には触れない）。適用は `apply_pending()` で行われる。"""
        if not callable(fn):
            raise TypeError(f"update expects a callable transform, got {type(fn).__name__}")
        with self._lock:
            self._pending.append(fn)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    # ---- オーナーのみ ----
    def apply_pending(self) -> int:
        """投入順に変換を最新値へ適用し、適用件数を返す。

        変換が例外を投げた場合、それ以前の適用結果は保持し、残りは待ち行列に戻して再送出する。
        """
        with self._lock:
            batch = list(self._pending)
            self._pending.clear()
        applied = 0
        try:
            for fn in batch:
                self._value = fn(self._value)
                self._version += 1
                applied += 1
        except Exception:
            with self._lock:
                # 失敗した変換は捨て、未適用分を先頭へ戻す
                self._pending.extendleft(reversed(batch[applied + 1 :]))
            logger.exception("state transform failed (cell=%s)", self.name)
            raise
        return applied

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """オーナーによる直接設定（バックグラウンドからは `update` を使う）。"""
        self._value = value
        self._version += 1

    @property
    def version(self) -> int:
        """適用済み変換/設定の累計。描画側の「変化したか」判定に使う。"""
        return self._version

    def __repr__(self) -> str:
        return f"SharedStateCell(name={self.name!r}, version={self._version}, pending={self.pending})"


__all__ = ["SharedStateCell"]
