"""
どこで: `engine.core` サブパッケージ。
何を: フレーム駆動（Tickable/FrameClock）・描画レート制御（FrameScheduler）・単一オーナー状態セル。
なぜ: 描画サイクルの基盤を構成し、上位層（Runtime/IO/API）から再利用可能にするため。
"""

from .frame_clock import FrameClock
from .frame_scheduler import FrameScheduler
from .state import SharedStateCell
from .tickable import Tickable

__all__ = ["FrameClock", "FrameScheduler", "SharedStateCell", "Tickable"]
