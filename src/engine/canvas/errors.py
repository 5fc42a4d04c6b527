"""
どこで: `engine.canvas` の例外定義。
何を: ドレイン中の操作単位の失敗（参照解決/未対応プリミティブ/型不一致）と、
      キュー/サーフェスのライフサイクル違反を表す例外群。
なぜ: 失敗した操作の位置と名前を文脈として保持し、呼び出し側がフレーム全体を止めずに
      失敗だけを集計・ログできるようにするため。
"""

from __future__ import annotations


class RefOpError(Exception):
    """ドレイン中の 1 操作の失敗。操作インデックスと操作名を文脈として持つ。"""

    kind = "RefOpError"

    def __init__(
        self,
        message: str,
        *,
        op_index: int | None = None,
        op_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.op_index = op_index
        self.op_name = op_name

    def with_context(self, op_index: int, op_name: str) -> "RefOpError":
        """操作の文脈を付与して自身を返す（resolver はインデックスを知らないため）。"""
        self.op_index = op_index
        self.op_name = op_name
        return self

    def __str__(self) -> str:
        if self.op_index is None:
            return self.message
        return f"[op#{self.op_index} {self.op_name}] {self.message}"


class ResolutionError(RefOpError):
    """`#ref:`/`#spreadRef:` が参照する id がドレイン時点で存在しない。"""

    kind = "ResolutionError"

    def __init__(self, ref_id: str, **kwargs) -> None:
        super().__init__(f"reference '{ref_id}' not found", **kwargs)
        self.ref_id = ref_id


class UnsupportedOperation(RefOpError):
    """サーフェスに該当するプリミティブが存在しない。"""

    kind = "UnsupportedOperation"


class TypeMismatch(RefOpError):
    """`#spreadRef:` の参照先が順序付きシーケンスではない。"""

    kind = "TypeMismatch"


class PrimitiveFailed(RefOpError):
    """プリミティブ実行中にサーフェス側で例外が発生した（元例外は __cause__）。"""

    kind = "PrimitiveFailed"


class DrainAborted(RefOpError):
    """ABORT ポリシーで先行操作が失敗したため実行されなかった。"""

    kind = "DrainAborted"


class QueueStateError(RuntimeError):
    """凍結済みキューへの追加、または 2 回目のドレイン。"""


class UnknownSurfaceError(KeyError):
    """`SurfaceHost` に登録されていない surface id への要求。"""


__all__ = [
    "RefOpError",
    "ResolutionError",
    "UnsupportedOperation",
    "TypeMismatch",
    "PrimitiveFailed",
    "DrainAborted",
    "QueueStateError",
    "UnknownSurfaceError",
]
