"""
どこで: `engine.canvas` の遅延操作キュー。
何を: 1 回の論理更新で積まれる描画コマンド列（`Operation`）を保持し、凍結後に 1 度だけ
      サーフェスへ順番に実行（ドレイン）する。結果は操作ごとの `OpResult` として返す。
なぜ: 描画面へ直接触れない更新ロジックから「あとで実行される描画手順」を記述し、
      サーフェスが生成した値（不透明ハンドル含む）を参照テーブル経由で後続の操作へ渡すため。

契約:
- `append` は純粋（I/O なし、プレースホルダも解釈しない）。
- ドレインは追加順に実行し、各操作の直前でのみプレースホルダを解決する。
- 失敗ポリシー（`DrainPolicy.CONTINUE`）: 解決失敗/未対応プリミティブ/プリミティブ例外は
  その操作だけを失敗扱いにし、次の操作へ進む。`DrainPolicy.ABORT` は最初の失敗以降を
  `DrainAborted` として報告する。
- 予約擬似操作 `addRef`/`dropRef` はサーフェスを呼ばない。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from .errors import (
    DrainAborted,
    PrimitiveFailed,
    QueueStateError,
    RefOpError,
    UnsupportedOperation,
)
from .reference_table import ReferenceTable
from .resolver import resolve_params

logger = logging.getLogger(__name__)

ADD_REF = "addRef"
DROP_REF = "dropRef"
RESERVED_OPS = frozenset({ADD_REF, DROP_REF})


class DrainPolicy(str, Enum):
    CONTINUE = "continue"
    ABORT = "abort"

    @classmethod
    def from_settings(cls) -> "DrainPolicy":
        from common import settings

        return cls(settings.get().DRAIN_POLICY)


@dataclass(slots=True, frozen=True)
class Operation:
    """1 つの描画コマンド（プリミティブ名・パラメータ・任意の捕捉名）。"""

    name: str
    params: tuple[Any, ...] = ()
    capture_as: str | None = None

    @classmethod
    def of(
        cls, name: str, params: Iterable[Any] | None = None, capture_as: str | None = None
    ) -> "Operation":
        if not isinstance(name, str) or not name:
            raise ValueError(f"operation name must be a non-empty str, got {name!r}")
        return cls(name=name, params=tuple(params or ()), capture_as=capture_as)


@dataclass(slots=True, frozen=True)
class OpResult:
    """ドレイン結果（操作 1 つにつき 1 件、追加順）。"""

    success: bool
    value: Any = None
    error: RefOpError | None = None

    @property
    def error_kind(self) -> str | None:
        return None if self.error is None else self.error.kind


def _lookup_primitive(surface: object, name: str):
    if name.startswith("_"):
        raise UnsupportedOperation(f"'{name}' is not a surface primitive")
    allowed = getattr(surface, "primitives", None)
    if allowed is not None and name not in allowed:
        raise UnsupportedOperation(f"surface has no primitive '{name}'")
    fn = getattr(surface, name, None)
    if fn is None or not callable(fn):
        raise UnsupportedOperation(f"surface has no primitive '{name}'")
    return fn


def _run_pseudo_op(op: Operation, table: ReferenceTable) -> Any:
    if op.name == ADD_REF:
        # addRef の data はリテラルのまま格納する（解決しない）
        if op.capture_as is not None:
            if len(op.params) != 1:
                raise RefOpError("addRef with capture_as expects exactly one data param")
            table.add_ref(op.capture_as, op.params[0])
            return op.params[0]
        if len(op.params) != 2 or not isinstance(op.params[0], str):
            raise RefOpError("addRef expects (id, data)")
        table.add_ref(op.params[0], op.params[1])
        return op.params[1]
    # dropRef
    for ref_id in op.params:
        if isinstance(ref_id, str):
            table.drop_ref(ref_id)
    return None


def _execute(op: Operation, surface: object, table: ReferenceTable) -> Any:
    if op.name in RESERVED_OPS:
        return _run_pseudo_op(op, table)
    fn = _lookup_primitive(surface, op.name)
    params = resolve_params(op.params, table)
    try:
        value = fn(*params)
    except Exception as e:
        raise PrimitiveFailed(f"{type(e).__name__}: {e}") from e
    if op.capture_as is not None:
        table.add_ref(op.capture_as, value)
    return value


def drain_operations(
    operations: Sequence[Operation],
    surface: object,
    table: ReferenceTable,
    policy: DrainPolicy = DrainPolicy.CONTINUE,
) -> list[OpResult]:
    """操作列をサーフェスへ追加順に実行し、操作ごとの結果を返す。"""
    results: list[OpResult] = []
    aborted_by: RefOpError | None = None
    for idx, op in enumerate(operations):
        if aborted_by is not None:
            results.append(
                OpResult(
                    False,
                    error=DrainAborted(
                        f"skipped after failure of op#{aborted_by.op_index}",
                        op_index=idx,
                        op_name=op.name,
                    ),
                )
            )
            continue
        try:
            value = _execute(op, surface, table)
        except RefOpError as e:
            e.with_context(idx, op.name)
            logger.debug("drain failure: %s", e)
            results.append(OpResult(False, error=e))
            if policy is DrainPolicy.ABORT:
                aborted_by = e
            continue
        results.append(OpResult(True, value=value))
    return results


class OperationQueue:
    """1 回の論理更新ぶんの追記専用バッファ。凍結後に 1 度だけドレインできる。"""

    def __init__(self) -> None:
        self._ops: list[Operation] = []
        self._frozen = False
        self._drained = False

    # --- build phase ---
    def append(
        self, name: str, params: Iterable[Any] | None = None, capture_as: str | None = None
    ) -> "OperationQueue":
        if self._frozen:
            raise QueueStateError("cannot append to a frozen queue")
        self._ops.append(Operation.of(name, params, capture_as))
        return self

    def add_ref(self, ref_id: str, data: Any) -> "OperationQueue":
        """`addRef` 擬似操作を積む（ドレイン時に data をそのまま格納）。"""
        return self.append(ADD_REF, [data], capture_as=ref_id)

    def drop_ref(self, *ref_ids: str) -> "OperationQueue":
        """`dropRef` 擬似操作を積む。"""
        return self.append(DROP_REF, ref_ids)

    def freeze(self) -> tuple[Operation, ...]:
        self._frozen = True
        return tuple(self._ops)

    # --- drain phase ---
    def drain(
        self,
        surface: object,
        table: ReferenceTable,
        policy: DrainPolicy = DrainPolicy.CONTINUE,
    ) -> list[OpResult]:
        if self._drained:
            raise QueueStateError("queue has already been drained")
        ops = self.freeze()
        self._drained = True
        return drain_operations(ops, surface, table, policy)

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._ops)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def drained(self) -> bool:
        return self._drained

    def __len__(self) -> int:
        return len(self._ops)

    def __repr__(self) -> str:
        state = "drained" if self._drained else "frozen" if self._frozen else "open"
        return f"OperationQueue(ops={len(self._ops)}, state={state})"


__all__ = [
    "ADD_REF",
    "DROP_REF",
    "RESERVED_OPS",
    "DrainPolicy",
    "Operation",
    "OpResult",
    "OperationQueue",
    "drain_operations",
]
