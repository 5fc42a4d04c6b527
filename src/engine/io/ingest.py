"""
どこで: `engine.io` の取り込み層。
何を: 行指向のデータ源（stdin 等）を単一のデーモンスレッドで逐次読み、数値として解釈できた行を
      `SharedStateCell` へ純粋変換（末尾に追加）として投入し、描画要求を出す `DataIngestWorker`。
なぜ: 入力待ちで描画ループを止めず、かつ UI 所有の構造へ直接書き込まずに状態を供給するため。

状態遷移: Idle → Active → Idle
- `start()`: Active なら no-op。そうでなければ新しい `CancelToken` を作りスレッドを起動。
- `stop()`: 現在のトークンを発火して Idle へ。トークンは必ず新しいものへ差し替える。
- 終端到達: 自分のトークンが現行のままなら Idle へ戻る。
- I/O 失敗: ログ + `on_error(message)` 通知の上で Idle へ。描画ループは落とさない。

注意:
- ブロッキング読み込みは中断できない。停止後に届いた 1 行は読まれるが、自分のトークンが
  発火済みであることを確認して適用せずに終了する。
- 呼び出し可能でないソース（`sys.stdin` 等）を共有したまま stop → start すると、旧スレッドが
  次の 1 行を読み捨てる。再開するオーナーは `start()` ごとに新しい反復子を返す callable を渡す。
- 取り込み量にバックプレッシャは無い（セルのシーケンスはワーカの寿命の間増え続ける）。
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Iterable, Literal, Sequence

from common import settings
from engine.core.state import SharedStateCell

logger = logging.getLogger(__name__)

IngestState = Literal["idle", "active"]


class CancelToken:
    """単発・エッジトリガのキャンセル信号。再利用しない（`start()` ごとに新規作成）。"""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


def parse_number(text: str) -> float | None:
    """1 行を trim して float へ。解釈できない/空行/NaN/無限大は None（スキップ扱い）。"""
    s = text.strip()
    if not s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def append_value(value: float) -> Callable[[Sequence[float]], list[float]]:
    """「末尾に value を追加」する純粋変換を返す（入力リストは変更しない）。"""

    def _transform(current: Sequence[float]) -> list[float]:
        return [*current, value]

    return _transform


class DataIngestWorker:
    """キャンセル可能なバックグラウンド取り込みタスク（所有者 1 つにつき同時 1 本）。"""

    def __init__(
        self,
        source: Iterable[str] | Callable[[], Iterable[str]],
        cell: SharedStateCell,
        request_render: Callable[[], None],
        *,
        parse: Callable[[str], float | None] = parse_number,
        transform: Callable[[float], Callable] = append_value,
        on_error: Callable[[str], None] | None = None,
        name: str = "DataIngestWorker",
    ) -> None:
        """
        source: 行の反復子（テキストストリーム等）。呼び出し可能なら `start()` ごとに呼んで取得。
            stop → start で再開するなら callable を渡す（共有ストリームでは旧スレッドが 1 行読み捨てる）。
        cell: 値を投入する状態セル。
        request_render: 値の投入後に呼ぶ描画要求関数。
        parse: 1 行 → 数値 or None（None はスキップ）。
        transform: 数値 → 状態変換関数。既定は末尾追加。
        on_error: I/O 失敗時にユーザ向けメッセージを受け取る関数。
        """
        self._source = source
        self._cell = cell
        self._request_render = request_render
        self._parse = parse
        self._transform = transform
        self._on_error = on_error
        self._name = name
        self._lock = threading.Lock()
        self._state: IngestState = "idle"
        self._token = CancelToken()
        self._thread: threading.Thread | None = None
        self.last_error: str | None = None
        self.lines_read = 0
        self.lines_skipped = 0

    def __repr__(self) -> str:
        return f"DataIngestWorker(name={self._name!r}, state={self._state})"

    # --- public API ---
    @property
    def state(self) -> IngestState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state == "active"

    def start(self) -> bool:
        """読み込みを開始する。既に Active なら何もせず False。"""
        with self._lock:
            if self._state == "active":
                return False
            token = CancelToken()
            self._token = token
            self._state = "active"
            self.last_error = None
            th = threading.Thread(
                target=self._run, args=(token,), name=self._name, daemon=True
            )
            self._thread = th
        th.start()
        logger.debug("%s started", self._name)
        return True

    def stop(self) -> None:
        """現在のトークンを発火して Idle へ。以降の入力はセルへ反映されない。"""
        with self._lock:
            self._token.cancel()
            # 古いトークンが後続の start() から見えないよう必ず差し替える
            self._token = CancelToken()
            self._state = "idle"
        logger.debug("%s stopped", self._name)

    def join(self, timeout: float | None = None) -> bool:
        """最後に起動したスレッドの終了を待つ。終了していれば True。"""
        th = self._thread
        if th is None:
            return True
        th.join(timeout)
        return not th.is_alive()

    # --- worker loop ---
    def _open_source(self) -> Iterable[str]:
        src = self._source
        if callable(src) and not hasattr(src, "__iter__"):
            return src()
        return src  # type: ignore[return-value]

    def _finish(self, token: CancelToken) -> None:
        with self._lock:
            if self._token is token:
                self._state = "idle"

    def _run(self, token: CancelToken) -> None:
        log_skips = settings.get().INGEST_LOG_SKIPS
        try:
            for line in self._open_source():
                if token.cancelled:
                    return
                self.lines_read += 1
                value = self._parse(line)
                if value is None:
                    self.lines_skipped += 1
                    if log_skips:
                        logger.debug("%s skipped line: %r", self._name, line)
                    continue
                self._cell.update(self._transform(value))
                self._request_render()
        except (OSError, ValueError) as e:
            if token.cancelled:
                return
            message = f"input stream failed: {e}"
            logger.exception("%s stage=read error=%s", self._name, e)
            self.last_error = message
            if self._on_error is not None:
                try:
                    self._on_error(message)
                except Exception:
                    logger.exception("%s on_error callback failed", self._name)
        finally:
            self._finish(token)


__all__ = ["CancelToken", "DataIngestWorker", "IngestState", "append_value", "parse_number"]
