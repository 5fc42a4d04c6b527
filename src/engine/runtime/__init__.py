"""
どこで: `engine.runtime` サブパッケージ。
何を: 描画要求シグナル/コンポーネント契約/描画ループによる更新サイクルの実行を提供。
なぜ: 状態更新と描画キュー投入を単一スレッドへ直列化し、バックグラウンドとの境界を細く保つため。
"""

from .component import Cleanup, Component, RenderContext
from .loop import RenderLoop
from .signal import RenderSignal

__all__ = ["Cleanup", "Component", "RenderContext", "RenderLoop", "RenderSignal"]
