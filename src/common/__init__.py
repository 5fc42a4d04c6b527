"""
どこで: `common` パッケージ。
何を: 環境変数ヘルパ/設定スナップショット/ロギング初期化などの共通基盤。
なぜ: engine/api の双方から再利用する基盤を分離し、依存の向きを単純化するため。
"""

from .logging import setup_default_logging

__all__ = [
    "setup_default_logging",
]
