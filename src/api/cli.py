"""`refcanvas` コマンド: graph / particles / histogram のデモを起動する。

入力は標準入力（1 行 1 数値）。例:
    seq 1 100 | refcanvas graph
    refcanvas particles --count 30
    python -c "import random;[print(random.gauss(0,1)) for _ in range(500)]" | refcanvas histogram -b 20
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from util.utils import load_section

from .histogram import MAX_BUCKETS, MIN_BUCKETS


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="refcanvas", description=__doc__.splitlines()[0])
    parser.add_argument("--fps", type=int, default=None, help="frame clock rate (default: config)")
    sub = parser.add_subparsers(dest="app", required=True)

    sub.add_parser("graph", help="live line graph of numbers read from stdin")

    p = sub.add_parser("particles", help="bouncing particles animation")
    p.add_argument("--count", type=int, default=None, help="number of particles")
    p.add_argument("--seed", type=int, default=None, help="random seed")

    h = sub.add_parser("histogram", help="live histogram of numbers read from stdin")
    h.add_argument("-b", "--buckets", type=int, default=None, help="initial number of buckets")
    h.add_argument("--min", dest="min_value", type=float, default=None, help="minimum value (auto if omitted)")
    h.add_argument("--max", dest="max_value", type=float, default=None, help="maximum value (auto if omitted)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    from .runner import run_app

    if args.app == "graph":
        from .graph import GraphLayout, LiveGraph

        cfg = load_section("graph")
        layout = GraphLayout(
            width=int(cfg.get("width", 800)),
            height=int(cfg.get("height", 400)),
            padding=int(cfg.get("padding", 40)),
            point_radius=float(cfg.get("point_radius", 3)),
        )
        run_app(
            LiveGraph(sys.stdin, layout=layout),
            width=layout.width,
            height=layout.height,
            fps=args.fps,
            caption="Live Data Graph",
        )
        return 0

    if args.app == "particles":
        from .particles import ParticleField

        cfg = load_section("particles")
        extent = int(cfg.get("size", 300))
        delay_ms = cfg.get("wakeup_delay_ms")
        field = ParticleField(
            args.count if args.count is not None else int(cfg.get("count", 10)),
            extent=extent,
            min_interval_ticks=cfg.get("min_interval_ticks"),
            wakeup_delay=None if delay_ms is None else float(delay_ms) / 1000.0,
            seed=args.seed,
        )
        run_app(field, width=extent, height=extent, fps=args.fps, caption="Particles")
        return 0

    from .histogram import Histogram, HistogramLayout

    cfg = load_section("histogram")
    buckets = args.buckets if args.buckets is not None else int(cfg.get("buckets", 10))
    if buckets < MIN_BUCKETS:
        parser.error(f"number of buckets must be at least {MIN_BUCKETS}")
    if buckets > MAX_BUCKETS:
        parser.error(f"number of buckets must be at most {MAX_BUCKETS}")
    layout = HistogramLayout(width=int(cfg.get("width", 800)), height=int(cfg.get("height", 320)))
    run_app(
        Histogram(
            sys.stdin,
            num_buckets=buckets,
            min_value=args.min_value,
            max_value=args.max_value,
            layout=layout,
        ),
        width=layout.width,
        height=layout.height,
        fps=args.fps,
        caption="Histogram",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
