"""
どこで: `engine.canvas` の参照テーブル。
何を: サーフェス 1 つにつき 1 つ、呼び出し側が決めた文字列 id → 値（JSON 互換または不透明ハンドル）を保持。
なぜ: グラデーション等のサーフェス生成物はシリアライズ境界を越えられないため、
      文字列 id による間接参照で後続の操作/サイクルから再利用できるようにするため。

寿命:
- テーブルはキュー/描画サイクルより長生きし、サーフェスの退役時にのみ破棄される
  （`SurfaceHost.retire()`）。
"""

from __future__ import annotations

from typing import Any, Iterator


class _Missing:
    """`ReferenceTable.get` の「存在しない」を表す番兵（None を値として格納可能にする）。"""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()


class ReferenceTable:
    """文字列 id → 値の単純な表。id はテーブル内で常に一意。"""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def add_ref(self, ref_id: str, value: Any) -> None:
        """挿入または上書き。"""
        if not isinstance(ref_id, str) or not ref_id:
            raise ValueError(f"reference id must be a non-empty str, got {ref_id!r}")
        self._entries[ref_id] = value

    def drop_ref(self, ref_id: str) -> None:
        """即時かつ無条件に削除（存在しなければ no-op）。"""
        self._entries.pop(ref_id, None)

    def get(self, ref_id: str) -> Any:
        """格納値、または `MISSING` を返す。"""
        return self._entries.get(ref_id, MISSING)

    def ids(self) -> list[str]:
        return list(self._entries.keys())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, ref_id: object) -> bool:
        return ref_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"ReferenceTable(ids={sorted(self._entries)})"


__all__ = ["ReferenceTable", "MISSING"]
