"""
どこで: `util.color`。
何を: キャンバス系の色指定（"#RRGGBB", "rgba(r, g, b, a)", タプル）を RGBA へ正規化。
なぜ: 描画プリミティブ（fillStyle/strokeStyle）とサーフェス実装で同一の受理仕様を使うため。
"""

from __future__ import annotations

import re
from typing import Sequence

_CSS_FUNC = re.compile(r"^\s*(rgba?)\s*\(\s*([^)]*)\)\s*$", re.IGNORECASE)


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x)


def parse_hex_color_str(s: str) -> tuple[float, float, float, float]:
    """Hex 文字列から RGBA(0–1) を返す。

    受理形式: "#RGB", "#RRGGBB", "#RRGGBBAA"（"#" 省略可）。大文字/小文字は不問。
    """
    t = s.strip()
    if t.startswith("#"):
        t = t[1:]
    if len(t) == 3:
        t = "".join(ch * 2 for ch in t)
    if len(t) not in (6, 8):
        raise ValueError(f"invalid hex color length: '{s}' (expected RGB, RRGGBB or RRGGBBAA)")
    try:
        r = int(t[0:2], 16)
        g = int(t[2:4], 16)
        b = int(t[4:6], 16)
        a = int(t[6:8], 16) if len(t) == 8 else 255
    except ValueError as e:
        raise ValueError(f"invalid hex color: '{s}'") from e
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def parse_css_color_str(s: str) -> tuple[float, float, float, float]:
    """CSS 関数形式 `rgb(r, g, b)` / `rgba(r, g, b, a)` を RGBA(0–1) へ。

    r/g/b は 0–255、a は 0–1。
    """
    m = _CSS_FUNC.match(s)
    if m is None:
        raise ValueError(f"invalid css color: '{s}'")
    kind, body = m.group(1).lower(), m.group(2)
    parts = [p.strip() for p in body.split(",")]
    expected = 4 if kind == "rgba" else 3
    if len(parts) != expected:
        raise ValueError(f"{kind}() expects {expected} components: '{s}'")
    try:
        r, g, b = (float(p) for p in parts[:3])
        a = float(parts[3]) if expected == 4 else 1.0
    except ValueError as e:
        raise ValueError(f"invalid css color: '{s}'") from e
    return (_clamp01(r / 255.0), _clamp01(g / 255.0), _clamp01(b / 255.0), _clamp01(a))


def _as_sequence(value: object) -> Sequence[float | int] | None:
    if isinstance(value, (list, tuple)):
        return value  # type: ignore[return-value]
    return None


def normalize_color(value: object) -> tuple[float, float, float, float]:
    """色を RGBA(0–1) へ正規化する。

    - 受理: Hex 文字列, CSS rgb()/rgba() 文字列, (r,g,b[,a]) （0–1 または 0–255）
    - 返値: (r,g,b,a) （0–1）
    """
    if isinstance(value, str):
        if _CSS_FUNC.match(value):
            return parse_css_color_str(value)
        return parse_hex_color_str(value)
    seq = _as_sequence(value)
    if seq is None:
        raise ValueError(f"unsupported color type: {type(value)!r}")
    if len(seq) not in (3, 4):
        raise ValueError("color tuple/list must be length 3 or 4")
    try:
        fseq = [float(x) for x in seq]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color tuple/list: {value!r}") from e
    if len(fseq) == 3:
        fseq.append(1.0)
    # 全要素が 0..1 ならそのまま
    if all(0.0 <= x <= 1.0 for x in fseq):
        r, g, b, a = fseq
        return (r, g, b, a)
    # それ以外は 0–255 とみなしてスケール
    r, g, b, a = (max(0, min(255, int(round(x)))) for x in fseq)
    if len(seq) == 3:
        a = 255
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def to_u8_rgba(value: object) -> tuple[int, int, int, int]:
    """色を RGBA(0–255) へ変換する。"""
    r, g, b, a = normalize_color(value)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), int(round(a * 255)))


def mix_u8(
    c0: tuple[int, int, int, int], c1: tuple[int, int, int, int], t: float
) -> tuple[int, int, int, int]:
    """2 色を線形補間（t は 0..1 にクランプ）。グラデーションの近似に使う。"""
    t = _clamp01(t)
    return tuple(int(round(a + (b - a) * t)) for a, b in zip(c0, c1))  # type: ignore[return-value]


__all__ = [
    "parse_hex_color_str",
    "parse_css_color_str",
    "normalize_color",
    "to_u8_rgba",
    "mix_u8",
]
