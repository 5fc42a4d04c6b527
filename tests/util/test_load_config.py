from __future__ import annotations

from pathlib import Path

from util import utils


def test_default_config_has_demo_sections() -> None:
    cfg = utils.load_config()
    assert cfg["app"]["fps"] == 60
    assert utils.load_section("histogram")["buckets"] == 10
    assert utils.load_section("particles")["min_interval_ticks"] == 30
    assert utils.load_section("nope") == {}


def test_root_config_overrides_top_level_sections(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("app: {fps: 60}\ngraph: {width: 800}\n")
    (tmp_path / "config.yaml").write_text("app: {fps: 30}\n")
    monkeypatch.setattr(utils, "_find_project_root", lambda start: tmp_path)
    cfg = utils.load_config()
    assert cfg["app"] == {"fps": 30}
    assert cfg["graph"] == {"width": 800}


def test_broken_yaml_is_fail_soft(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("app: [unclosed\n")
    monkeypatch.setattr(utils, "_find_project_root", lambda start: tmp_path)
    assert utils.load_config() == {}
