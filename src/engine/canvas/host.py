"""
どこで: `engine.canvas` のサーフェス管理層。
何を: surface id → (サーフェス, 参照テーブル, ドレイン用ロック) を管理し、
      `submit(surface_id, operations)` で操作列を 1 件ずつの結果付きで実行する。
なぜ: 参照テーブルの寿命をサーフェスに結び付け（退役時にのみ破棄）、同一サーフェスで
      キューが交互に実行されないよう直列化するため。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Sequence

from .errors import UnknownSurfaceError
from .queue import DrainPolicy, Operation, OperationQueue, OpResult, drain_operations
from .reference_table import ReferenceTable

logger = logging.getLogger(__name__)


@dataclass
class _SurfaceSlot:
    surface: object
    table: ReferenceTable = field(default_factory=ReferenceTable)
    lock: threading.Lock = field(default_factory=threading.Lock)


class SurfaceHost:
    """登録済みサーフェスへの操作投入窓口。"""

    def __init__(self, policy: DrainPolicy | None = None) -> None:
        self._slots: dict[str, _SurfaceSlot] = {}
        self._lock = threading.Lock()
        self._policy = policy if policy is not None else DrainPolicy.from_settings()

    @property
    def policy(self) -> DrainPolicy:
        return self._policy

    def register(self, surface_id: str, surface: object) -> None:
        """サーフェスを登録（同じ id の再登録は旧サーフェスを退役させてから置き換え）。"""
        with self._lock:
            old = self._slots.get(surface_id)
            self._slots[surface_id] = _SurfaceSlot(surface)
        if old is not None:
            # 実行中のドレインが終わるのを待ってから破棄
            with old.lock:
                old.table.clear()
            logger.debug("surface '%s' replaced; previous references discarded", surface_id)

    def retire(self, surface_id: str) -> None:
        """サーフェスを退役させ、参照テーブルを破棄する（未登録なら no-op）。"""
        with self._lock:
            slot = self._slots.pop(surface_id, None)
        if slot is None:
            return
        # 実行中のドレインが終わるのを待ってから破棄
        with slot.lock:
            slot.table.clear()

    def _slot(self, surface_id: str) -> _SurfaceSlot:
        with self._lock:
            slot = self._slots.get(surface_id)
        if slot is None:
            raise UnknownSurfaceError(surface_id)
        return slot

    def surface(self, surface_id: str) -> object:
        return self._slot(surface_id).surface

    def table(self, surface_id: str) -> ReferenceTable:
        return self._slot(surface_id).table

    def has_surface(self, surface_id: str) -> bool:
        with self._lock:
            return surface_id in self._slots

    @property
    def surface_ids(self) -> list[str]:
        with self._lock:
            return list(self._slots.keys())

    def submit(
        self,
        surface_id: str,
        operations: Sequence[Operation] | OperationQueue,
    ) -> list[OpResult]:
        """操作列を実行し、操作ごとの結果を順に返す。

        `OperationQueue` を渡した場合はそのキューを凍結・ドレイン済みにする。
        """
        slot = self._slot(surface_id)
        with slot.lock:
            if isinstance(operations, OperationQueue):
                return operations.drain(slot.surface, slot.table, self._policy)
            return drain_operations(tuple(operations), slot.surface, slot.table, self._policy)

    def close(self) -> None:
        """全サーフェスを退役させる（多重呼び出しに安全）。"""
        for surface_id in self.surface_ids:
            self.retire(surface_id)


__all__ = ["SurfaceHost"]
