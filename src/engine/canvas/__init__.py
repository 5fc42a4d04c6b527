"""
どこで: `engine.canvas` サブパッケージ。
何を: 遅延操作キュー・参照テーブル・プレースホルダ解決・サーフェス管理を提供。
なぜ: 描画面へ直接触れない更新ロジックから描画手順を記述し、後で安全に実行するため。
"""

from .errors import (
    DrainAborted,
    PrimitiveFailed,
    QueueStateError,
    RefOpError,
    ResolutionError,
    TypeMismatch,
    UnknownSurfaceError,
    UnsupportedOperation,
)
from .host import SurfaceHost
from .queue import DrainPolicy, Operation, OperationQueue, OpResult, drain_operations
from .reference_table import MISSING, ReferenceTable
from .resolver import REF_PREFIX, SPREAD_REF_PREFIX, ref, resolve_params, spread_ref
from .surface import CANVAS_PRIMITIVES, Gradient, RecordingSurface, Surface

__all__ = [
    "CANVAS_PRIMITIVES",
    "DrainAborted",
    "DrainPolicy",
    "Gradient",
    "MISSING",
    "Operation",
    "OperationQueue",
    "OpResult",
    "PrimitiveFailed",
    "QueueStateError",
    "REF_PREFIX",
    "RecordingSurface",
    "RefOpError",
    "ReferenceTable",
    "ResolutionError",
    "SPREAD_REF_PREFIX",
    "Surface",
    "SurfaceHost",
    "TypeMismatch",
    "UnknownSurfaceError",
    "UnsupportedOperation",
    "drain_operations",
    "ref",
    "resolve_params",
    "spread_ref",
]
