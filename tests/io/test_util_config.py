from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from engine.export.image import frame_path, save_png
from engine.render.surface import ArraySurface
from util import utils


def test_load_config_overlays_root_config(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("fps: 30\npursuers: 2\n", encoding="utf-8")
    (tmp_path / "config.yaml").write_text("fps: 12\n", encoding="utf-8")
    monkeypatch.setattr(utils, "project_root", lambda: tmp_path)
    assert utils.load_config() == {"fps": 12, "pursuers": 2}


def test_load_config_is_fail_soft(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")
    (tmp_path / "config.yaml").write_text("fps: [unclosed\n", encoding="utf-8")
    monkeypatch.setattr(utils, "project_root", lambda: tmp_path)
    assert utils.load_config() == {}


def test_resolve_path_is_relative_to_project_root(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(utils, "project_root", lambda: tmp_path)
    assert utils.resolve_path("asset/car.obj") == tmp_path / "asset" / "car.obj"
    assert utils.resolve_path(None) is None
    assert utils.resolve_path(tmp_path / "x") == tmp_path / "x"


def test_default_config_ships_expected_keys() -> None:
    cfg = utils.load_config()
    assert cfg["colors"]["clear"] == [0, 127, 255]
    assert cfg["pursuers"] == 2


def test_save_png_from_surface(tmp_path: Path) -> None:
    import imageio.v3 as iio

    surface = ArraySurface(5, 3)
    surface.clear((10, 20, 30))
    surface.present()
    path = save_png(surface, frame_path(7, tmp_path / "frames"))
    assert path.name == "frame_00007.png"
    np.testing.assert_array_equal(iio.imread(path), np.full((3, 5, 3), (10, 20, 30), dtype=np.uint8))


def test_frame_path_defaults_under_project_root(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    from engine.export import image

    monkeypatch.setattr(image, "project_root", lambda: tmp_path)
    path = image.frame_path(3, prefix="chase")
    assert path == tmp_path / "data" / "frames" / "chase_00003.png"
    assert path.parent.is_dir()
    with pytest.raises(ValueError):
        image.frame_path(-1, tmp_path)
    with pytest.raises(ValueError):
        image.frame_path(0, tmp_path, prefix="a/b")
