"""
どこで: `engine.canvas` のパラメータ解決層。
何を: 操作のパラメータ列を走査し、`#ref:<id>` を参照値へ、`#spreadRef:<id>` を参照シーケンスの
      要素列（位置に展開）へ置き換えた新しいリストを返す。
なぜ: プレースホルダはドレイン時にのみ解決する契約を 1 箇所に閉じ込めるため（追加時には呼ばない）。

規則:
- 完全一致のみ対象: 先頭がプレフィックスで始まる `str` 要素だけがプレースホルダ。
- ネストしたコンテナの中身は走査しない。
- `#spreadRef:` の参照先は list/tuple のみ許容（str/bytes/Mapping 等は `TypeMismatch`）。
"""

from __future__ import annotations

from typing import Any, Sequence

from .errors import ResolutionError, TypeMismatch
from .reference_table import MISSING, ReferenceTable

REF_PREFIX = "#ref:"
SPREAD_REF_PREFIX = "#spreadRef:"


def ref(ref_id: str) -> str:
    """`#ref:<id>` プレースホルダを作る。"""
    return f"{REF_PREFIX}{ref_id}"


def spread_ref(ref_id: str) -> str:
    """`#spreadRef:<id>` プレースホルダを作る。"""
    return f"{SPREAD_REF_PREFIX}{ref_id}"


def _lookup(table: ReferenceTable, ref_id: str) -> Any:
    value = table.get(ref_id)
    if value is MISSING:
        raise ResolutionError(ref_id)
    return value


def resolve_params(params: Sequence[Any], table: ReferenceTable) -> list[Any]:
    """プレースホルダを解決したパラメータ列を返す（入力は変更しない）。

    Raises
    ------
    ResolutionError
        参照 id がテーブルに存在しない。
    TypeMismatch
        `#spreadRef:` の参照先が順序付きシーケンスではない。
    """
    resolved: list[Any] = []
    for p in params:
        if isinstance(p, str):
            if p.startswith(SPREAD_REF_PREFIX):
                ref_id = p[len(SPREAD_REF_PREFIX) :]
                value = _lookup(table, ref_id)
                if not isinstance(value, (list, tuple)):
                    raise TypeMismatch(
                        f"spread reference '{ref_id}' must be an ordered sequence, "
                        f"got {type(value).__name__}"
                    )
                resolved.extend(value)
                continue
            if p.startswith(REF_PREFIX):
                resolved.append(_lookup(table, p[len(REF_PREFIX) :]))
                continue
        resolved.append(p)
    return resolved


__all__ = ["REF_PREFIX", "SPREAD_REF_PREFIX", "ref", "spread_ref", "resolve_params"]
