from __future__ import annotations

import pytest

from util.color import mix_u8, normalize_color, parse_css_color_str, parse_hex_color_str, to_u8_rgba


def test_parse_hex_forms() -> None:
    assert parse_hex_color_str("#ff0000") == (1.0, 0.0, 0.0, 1.0)
    assert parse_hex_color_str("00FF0080")[3] == pytest.approx(128 / 255)
    assert parse_hex_color_str("#fff") == (1.0, 1.0, 1.0, 1.0)


@pytest.mark.parametrize("bad", ["#12", "#12345", "#gggggg", ""])
def test_parse_hex_invalid(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_hex_color_str(bad)


def test_parse_css_rgb_and_rgba() -> None:
    assert parse_css_color_str("rgb(255, 0, 0)") == (1.0, 0.0, 0.0, 1.0)
    r, g, b, a = parse_css_color_str("RGBA(0, 51, 255, 0.7)")
    assert (r, g, b) == (0.0, 0.2, 1.0)
    assert a == pytest.approx(0.7)
    with pytest.raises(ValueError):
        parse_css_color_str("rgba(1, 2, 3)")


def test_normalize_tuples_in_both_ranges() -> None:
    assert normalize_color((0.1, 0.2, 0.3)) == (0.1, 0.2, 0.3, 1.0)
    assert normalize_color([255, 0, 0]) == (1.0, 0.0, 0.0, 1.0)
    with pytest.raises(ValueError):
        normalize_color((1, 2))
    with pytest.raises(ValueError):
        normalize_color(object())


def test_to_u8_and_mix() -> None:
    assert to_u8_rgba("rgba(10, 20, 30, 1)") == (10, 20, 30, 255)
    assert mix_u8((0, 0, 0, 255), (200, 100, 50, 255), 0.5) == (100, 50, 25, 255)
    assert mix_u8((0, 0, 0, 0), (10, 10, 10, 10), 2.0) == (10, 10, 10, 10)
