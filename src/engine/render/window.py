"""
どこで: `engine.render` の描画ウィンドウ薄ラッパ。
何を: Pyglet Window（MSAA/背景クリア）と、`PygletCanvasSurface` の Batch 描画を on_draw に結線。
なぜ: ランナーから GUI 依存を切り離し、最小インターフェイスで統一するため。

使用例:
    win = CanvasWindow(800, 400, caption="Live Data Graph")
    surface = PygletCanvasSurface(800, 400)
    win.add_draw_callback(surface.draw)
    pyglet.app.run()
"""

from __future__ import annotations

from typing import Callable

import pyglet
from pyglet.gl import Config, glClearColor


class CanvasWindow(pyglet.window.Window):
    def __init__(
        self,
        width: int,
        height: int,
        *,
        caption: str = "refcanvas",
        bg_color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0),
    ):
        """ウィンドウを生成する。

        引数:
            width: ウィンドウ幅（ピクセル）。キャンバス幅と一致させる。
            height: ウィンドウ高さ（ピクセル）。
            bg_color: 背景色 RGBA（0.0〜1.0）。
        """
        # 線描画を滑らかにするために MSAA を有効化
        config = Config(double_buffer=True, sample_buffers=1, samples=4, vsync=True)
        super().__init__(width=width, height=height, caption=caption, config=config)
        self._bg_color = bg_color
        self._draw_callbacks: list[Callable[[], None]] = []

    def add_draw_callback(self, func: Callable[[], None]) -> None:
        """
        `on_draw` 中に呼び出す描画関数を登録する（登録順に呼び出される）。
        """
        self._draw_callbacks.append(func)

    def on_draw(self):  # Pyglet 既定のイベント名
        r, g, b, a = self._bg_color
        glClearColor(r, g, b, a)
        self.clear()
        for cb in self._draw_callbacks:
            cb()
