"""
プロジェクト向けの軽量ロギングユーティリティ。

要点:
- 各モジュールは `logging.getLogger(__name__)` でロガーを取得する。
- ランナー/CLI からは `setup_default_logging()` を 1 度だけ呼ぶ。レベル未指定時は
  `RCV_LOG_LEVEL`（`common.settings`）に従う。
"""

from __future__ import annotations

import logging

from . import settings


def setup_default_logging(level: int | str | None = None) -> None:
    """最小限のロギング設定を 1 度だけ適用する。

    - ルートロガーにハンドラが既にあれば何もしない（no-op）
    - 上位のランナー/CLI から呼び出す想定
    """
    if level is None:
        level = settings.get().LOG_LEVEL
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        # Assume the app has configured logging
        return
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s [%(threadName)s]: %(message)s",
    )


__all__ = ["setup_default_logging"]
