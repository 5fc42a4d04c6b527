"""
どこで: `engine.core` のレート制御。
何を: 単調増加する描画ティックと最小間隔しきい値で、重い再計算+再描画をそのサイクルで
      実行するかを判定する `FrameScheduler`。許可後は固定遅延の起床タイマで次の描画を要求する。
なぜ: 外部イベントの到着頻度に依存せずアニメーションを継続させつつ、描画頻度に上限を設けるため。

スレッド:
- `request_frame` は描画ループ（単一スレッド）からのみ呼ぶ。
- 起床タイマはデーモンスレッドで走り、`on_wakeup`（描画要求シグナル）だけを呼ぶ。
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from common import settings

logger = logging.getLogger(__name__)


class FrameScheduler:
    """`requestFrame` 相当のゲートと、固定遅延の起床スケジューラ。"""

    def __init__(
        self,
        min_interval_ticks: int | None = None,
        *,
        wakeup_delay: float | None = None,
        on_wakeup: Callable[[], None] | None = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        """
        min_interval_ticks: 許可間隔（ティック単位）。None で `RCV_MIN_INTERVAL_TICKS`。
        wakeup_delay: 起床までの秒数。None で `RCV_WAKEUP_DELAY_MS` / 1000。
        on_wakeup: 起床時に呼ぶ関数（通常は RenderSignal.request）。
        timer_factory: `threading.Timer` 互換のファクトリ（テスト差し替え用）。
        """
        s = settings.get()
        if min_interval_ticks is None:
            min_interval_ticks = s.MIN_INTERVAL_TICKS
        if wakeup_delay is None:
            wakeup_delay = s.WAKEUP_DELAY_MS / 1000.0
        if int(min_interval_ticks) < 0:
            raise ValueError(f"min_interval_ticks must be >= 0, got {min_interval_ticks}")
        if float(wakeup_delay) < 0:
            raise ValueError(f"wakeup_delay must be >= 0, got {wakeup_delay}")
        self.min_interval_ticks = int(min_interval_ticks)
        self.wakeup_delay = float(wakeup_delay)
        self._on_wakeup = on_wakeup
        self._timer_factory = timer_factory
        self._last_allowed_tick: int | None = None
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()
        self._cancelled = False

    @property
    def last_allowed_tick(self) -> int | None:
        return self._last_allowed_tick

    def request_frame(self, current_tick: int) -> bool:
        """このティックで重い処理を実行してよいかを返す。

        初回（未許可）は常に許可。許可時のみ `last_allowed_tick` を更新する。
        """
        last = self._last_allowed_tick
        if last is not None and current_tick - last < self.min_interval_ticks:
            return False
        self._last_allowed_tick = current_tick
        return True

    def reset(self) -> None:
        """コールドスタート状態へ戻す。"""
        self._last_allowed_tick = None

    # ---- 起床 ----
    def schedule_wakeup(self) -> bool:
        """`wakeup_delay` 秒後に `on_wakeup` を呼ぶタイマを起動する。

        コールバック未設定、または `cancel()` 後は何もせず False。
        """
        if self._on_wakeup is None:
            return False
        with self._lock:
            if self._cancelled:
                return False
            timer: threading.Timer = self._timer_factory(self.wakeup_delay, lambda: None)
            timer.function = lambda: self._fire(timer)  # type: ignore[attr-defined]
            timer.daemon = True
            timer.name = "FrameSchedulerWakeup"
            self._timers.add(timer)
        timer.start()
        return True

    def _fire(self, timer: threading.Timer) -> None:
        with self._lock:
            self._timers.discard(timer)
            if self._cancelled:
                return
        callback = self._on_wakeup
        if callback is None:
            return
        try:
            callback()
        except Exception:
            # タイマスレッドから描画ループへは例外を伝搬できない
            logger.exception("wake-up callback failed")

    @property
    def pending_wakeups(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel(self) -> None:
        """保留中の起床を全て取り消し、以降の `schedule_wakeup` を無効化する。"""
        with self._lock:
            self._cancelled = True
            timers = list(self._timers)
            self._timers.clear()
        for t in timers:
            t.cancel()


__all__ = ["FrameScheduler"]
