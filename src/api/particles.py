"""
どこで: `api.particles`（パーティクルアニメーション）。
何を: 端で跳ね返る粒子群を `FrameScheduler` で間引きながら更新・描画する `ParticleField`。
なぜ: 外部データが無くても、許可フレームごとの起床タイマでアニメーションを継続させる例を示すため。

状態:
- 位置/速度/半径は NumPy 配列、色は "rgba(r, g, b, 0.7)" 文字列。
- 更新は純粋関数 `update_particles`（新しい状態を返す）。
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Callable

import numpy as np

from engine.core.frame_scheduler import FrameScheduler
from engine.runtime.component import Cleanup, Component, RenderContext
from engine.runtime.loop import RenderLoop


@dataclass(frozen=True)
class ParticleState:
    pos: np.ndarray  # (N, 2) float
    vel: np.ndarray  # (N, 2) float
    size: np.ndarray  # (N,) float 半径
    colors: tuple[str, ...]

    def __len__(self) -> int:
        return int(self.pos.shape[0])


def init_particles(
    count: int, extent: int = 300, rng: np.random.Generator | None = None
) -> ParticleState:
    """ランダムな位置・速度（±1..3）・半径（3..12）・半透明色で初期化する。"""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    rng = rng if rng is not None else np.random.default_rng()
    pos = rng.integers(0, extent, size=(count, 2)).astype(float)
    speed = rng.integers(1, 4, size=(count, 2)).astype(float)
    direction = np.where(rng.integers(0, 2, size=(count, 2)) == 0, -1.0, 1.0)
    size = rng.integers(3, 13, size=count).astype(float)
    rgb = rng.integers(0, 256, size=(count, 3))
    colors = tuple(f"rgba({r}, {g}, {b}, 0.7)" for r, g, b in rgb)
    return ParticleState(pos=pos, vel=speed * direction, size=size, colors=colors)


def update_particles(state: ParticleState, extent: int = 300) -> ParticleState:
    """速度ぶん移動し、端（0 / extent）に達した軸の速度を反転した新しい状態を返す。"""
    pos = state.pos + state.vel
    hit = (pos <= 0) | (pos >= extent)
    vel = np.where(hit, -state.vel, state.vel)
    return ParticleState(pos=pos, vel=vel, size=state.size.copy(), colors=state.colors)


class ParticleField(Component):
    """レート制限付きで再描画を続けるパーティクル群。"""

    def __init__(
        self,
        count: int = 10,
        *,
        extent: int = 300,
        surface_id: str = "particles",
        min_interval_ticks: int | None = None,
        wakeup_delay: float | None = None,
        seed: int | None = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.surface_id = surface_id
        self.count = count
        self.extent = extent
        self._min_interval_ticks = min_interval_ticks
        self._wakeup_delay = wakeup_delay
        self._timer_factory = timer_factory
        self._rng = np.random.default_rng(seed)
        self.scheduler: FrameScheduler | None = None
        self.frames_drawn = 0

    def setup(self, loop: RenderLoop) -> Cleanup:
        self.scheduler = FrameScheduler(
            self._min_interval_ticks,
            wakeup_delay=self._wakeup_delay,
            on_wakeup=loop.signal.request,
            timer_factory=self._timer_factory,
        )
        self._particles = loop.create_cell(
            init_particles(self.count, self.extent, self._rng), name=f"{self.surface_id}.particles"
        )
        return self.scheduler.cancel

    @property
    def state(self) -> ParticleState:
        return self._particles.get()

    def render(self, ctx: RenderContext) -> None:
        if self.scheduler is None:
            raise RuntimeError("ParticleField is not mounted")
        if not ctx.has_surface(self.surface_id):
            return
        if not self.scheduler.request_frame(ctx.tick):
            # 起床が残っていなければ、アニメーションが止まらないよう 1 つ積んでおく
            if self.scheduler.pending_wakeups == 0:
                self.scheduler.schedule_wakeup()
            return

        new_state = update_particles(self._particles.get(), self.extent)
        self._particles.set(new_state)

        q = ctx.queue(self.surface_id)
        q.append("clearRect", [0, 0, self.extent, self.extent])
        for (x, y), r, color in zip(new_state.pos, new_state.size, new_state.colors):
            q.append("fillStyle", [color])
            q.append("beginPath")
            q.append("arc", [float(x), float(y), float(r), 0, 2 * math.pi])
            q.append("fill")
        self.frames_drawn += 1

        self.scheduler.schedule_wakeup()


__all__ = ["ParticleField", "ParticleState", "init_particles", "update_particles"]
