"""
どこで: `api.runner`（実行ランナー）。
何を: コンポーネント 1 つを `RenderLoop` にマウントし、pyglet ウィンドウ上の
      `PygletCanvasSurface` へ描画キューをドレインし続ける `run_app()`。
なぜ: 少ない記述でライブグラフ/パーティクル/ヒストグラムを対話的に実行できるようにするため。

実行フロー（概要）:
1) FPS 解決: 引数 > `RCV_FPS` > 設定ファイル `app.fps` > 60。
2) `RenderLoop` と `SurfaceHost` を生成し、サーフェスを `component.surface_id` で登録。
3) `FrameClock` を `pyglet.clock.schedule_interval` で駆動（描画要求があったフレームだけサイクル実行）。
4) `ESC` またはウィンドウクローズで `RenderLoop.close()`（ワーカ停止/タイマ取消/参照テーブル破棄）。

`init_only=True` では pyglet を読み込まず、`RecordingSurface` を登録したループを返す（ヘッドレス検証用）。
"""

from __future__ import annotations

import logging

from common import settings
from common.logging import setup_default_logging
from engine.canvas.surface import RecordingSurface
from engine.runtime.component import Component
from engine.runtime.loop import RenderLoop
from util.utils import load_section

logger = logging.getLogger(__name__)


def resolve_fps(requested_fps: int | None, *, default: int = 60) -> int:
    """FPS を解決して 1 以上の int を返す。"""
    if requested_fps is not None:
        try:
            return max(1, int(requested_fps))
        except (TypeError, ValueError):
            return max(1, int(default))
    env_fps = settings.get().FPS
    if env_fps is not None:
        return max(1, env_fps)
    try:
        return max(1, int(load_section("app").get("fps", default)))
    except (TypeError, ValueError):
        return max(1, int(default))


def resolve_background(background: object | None) -> object:
    if background is not None:
        return background
    return load_section("app").get("background", (0.0, 0.0, 0.0, 1.0))


def run_app(
    component: Component,
    *,
    width: int,
    height: int,
    fps: int | None = None,
    caption: str = "refcanvas",
    background: object | None = None,
    init_only: bool = False,
) -> RenderLoop | None:
    """コンポーネントをウィンドウで実行する（ブロッキング）。

    Parameters
    ----------
    component : Component
        マウントするコンポーネント。`component.surface_id` でサーフェスを登録する。
    width, height : int
        キャンバス（= ウィンドウ）サイズ [px]。
    fps : int | None
        FrameClock の駆動レート。None で設定から解決。
    background : RGBA | str | None
        背景色。None で設定 `app.background`。
    init_only : bool
        True で GUI を作らず、`RecordingSurface` 付きのループを返す。
    """
    setup_default_logging()
    fps = resolve_fps(fps)
    bg = resolve_background(background)

    loop = RenderLoop()
    if init_only:
        loop.host.register(component.surface_id, RecordingSurface(width, height))
        loop.mount(component)
        return loop

    # 遅延インポート（ヘッドレス環境でのウィンドウ生成を避ける）
    import pyglet
    from pyglet.window import key

    from engine.core.frame_clock import FrameClock
    from engine.render.pyglet_surface import PygletCanvasSurface
    from engine.render.window import CanvasWindow
    from util.color import normalize_color

    surface = PygletCanvasSurface(width, height, background=bg)
    loop.host.register(component.surface_id, surface)
    window = CanvasWindow(width, height, caption=caption, bg_color=normalize_color(bg))
    window.add_draw_callback(surface.draw)
    loop.mount(component)

    clock = FrameClock([loop])
    pyglet.clock.schedule_interval(clock.tick, 1.0 / fps)

    @window.event
    def on_key_press(sym, _mods):  # noqa: ANN001
        if sym == key.ESCAPE:
            window.close()

    @window.event
    def on_close():
        pyglet.clock.unschedule(clock.tick)
        loop.close()
        logger.info("closed after %d render cycles (%d op failures)", loop.cycles, loop.failures)

    pyglet.app.run()
    return None


__all__ = ["resolve_fps", "run_app"]
