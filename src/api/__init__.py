"""
どこで: `api` 入口（高レベル公開 API）。
何を: デモコンポーネント（LiveGraph/ParticleField/Histogram）と実行ランナー `run_app` を再輸出。
なぜ: 利用者が単一名前空間からコンポーネント生成→実行まで完結できるようにするため。

Usage:
    import sys
    from api import LiveGraph, run_app

    run_app(LiveGraph(sys.stdin), width=800, height=400)
"""

from .graph import GraphLayout, LiveGraph
from .histogram import Histogram, HistogramLayout
from .particles import ParticleField
from .runner import run_app

__all__ = [
    "GraphLayout",
    "Histogram",
    "HistogramLayout",
    "LiveGraph",
    "ParticleField",
    "run_app",
]
