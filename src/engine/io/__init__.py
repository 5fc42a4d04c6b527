"""
どこで: `engine.io` サブパッケージ（入力取り込み）。
何を: 行指向データ源を読み、共有状態セルへ値を供給するバックグラウンドワーカ。
なぜ: 入力依存を隔離し、描画ループからは状態セルと描画要求だけで参照できるようにするため。
"""

from .ingest import CancelToken, DataIngestWorker, append_value, parse_number

__all__ = ["CancelToken", "DataIngestWorker", "append_value", "parse_number"]
