"""
どこで: `engine.core` の更新インターフェース。
何を: 1 フレーム更新 `tick(dt)` を持つ `Tickable` Protocol を定義。
なぜ: フレーム駆動のオブジェクト（RenderLoop/ウィンドウ転送など）を FrameClock から一様に扱うため。
"""

from typing import Protocol


class Tickable(Protocol):
    """1 フレーム分の更新を行うインターフェース。"""

    def tick(self, dt: float) -> None:
        """`dt` 秒ぶん進める。描画要求が無ければ何もしなくてよい。"""
