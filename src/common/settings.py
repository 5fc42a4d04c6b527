"""
どこで: `common.settings`
何を: 描画キュー/スケジューラ/取り込みワーカの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, env_str

DRAIN_POLICIES = {"continue", "abort"}


@dataclass
class _Settings:
    # FrameScheduler
    MIN_INTERVAL_TICKS: int = 30
    WAKEUP_DELAY_MS: float = 60.0

    # OperationQueue
    DRAIN_POLICY: str = "continue"

    # DataIngestWorker
    INGEST_LOG_SKIPS: bool = False

    # Runner / logging
    FPS: int | None = None
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - 数値は下限丸めを適用（負の間隔/遅延は 0 扱い）。
    - 未知のドレインポリシーは既定の "continue" へフォールバック。
    """
    # FrameScheduler
    _settings.MIN_INTERVAL_TICKS = env_int("RCV_MIN_INTERVAL_TICKS", 30, min_value=0) or 0
    _settings.WAKEUP_DELAY_MS = env_float("RCV_WAKEUP_DELAY_MS", 60.0, min_value=0.0) or 0.0

    # OperationQueue
    _settings.DRAIN_POLICY = env_str("RCV_DRAIN_POLICY", "continue", choices=DRAIN_POLICIES)

    # DataIngestWorker
    _settings.INGEST_LOG_SKIPS = env_bool("RCV_INGEST_LOG_SKIPS", False)

    # Runner / logging
    _settings.FPS = env_int("RCV_FPS", None, min_value=1)
    _settings.LOG_LEVEL = env_str("RCV_LOG_LEVEL", "info").upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings", "DRAIN_POLICIES"]
