from __future__ import annotations

import numpy as np
import pytest

from engine.render.surface import ArraySurface, TexturePaint


def test_clear_and_present_copy_back_to_front() -> None:
    presented: list[np.ndarray] = []
    s = ArraySurface(6, 4, on_present=lambda frame: presented.append(frame.copy()))
    s.clear((0, 127, 255))
    assert s.front().sum() == 0
    s.present()
    assert s.presented == 1
    np.testing.assert_array_equal(s.front()[0, 0], [0, 127, 255])
    assert len(presented) == 1 and presented[0].shape == (4, 6, 3)


def test_clear_accepts_hex_and_unit_floats() -> None:
    s = ArraySurface(2, 2)
    s.clear("#102030")
    np.testing.assert_array_equal(s.pixels[1, 1], [16, 32, 48])
    s.clear((1.0, 0.0, 0.5))
    np.testing.assert_array_equal(s.pixels[0, 0], [255, 0, 128])


def test_fill_polygon_flat_square_covers_pixel_centers() -> None:
    s = ArraySurface(8, 8)
    painted = s.fill_polygon(np.array([[0, 0], [4, 0], [4, 4], [0, 4]]), (255, 0, 0))
    assert painted >= 16
    mask = np.all(s.pixels == [255, 0, 0], axis=-1)
    assert mask.sum() == 16
    assert mask[:4, :4].all()


def test_fill_polygon_clips_to_surface() -> None:
    s = ArraySurface(4, 4)
    s.fill_polygon(np.array([[-10.0, -10.0], [20.0, -10.0], [-10.0, 20.0]]), (0, 255, 0))
    assert np.all(s.pixels[..., 1] == 255)


def test_fill_polygon_textured_identity_tiles_texture() -> None:
    tex = np.arange(4 * 4 * 3, dtype=np.uint8).reshape(4, 4, 3)
    s = ArraySurface(8, 8)
    s.fill_polygon(np.array([[0, 0], [8, 0], [8, 8], [0, 8]]), TexturePaint(tex, np.eye(3)))
    np.testing.assert_array_equal(s.pixels, np.tile(tex, (2, 2, 1)))


def test_fill_polygon_skips_singular_paint_and_degenerate_input() -> None:
    s = ArraySurface(4, 4)
    tex = np.full((2, 2, 3), 200, dtype=np.uint8)
    assert s.fill_polygon(np.array([[0, 0], [4, 0], [0, 4]]), TexturePaint(tex, np.zeros((3, 3)))) == 0
    assert s.fill_polygon(np.array([[0, 0], [4, 0]]), (255, 255, 255)) == 0
    assert s.fill_polygon(np.array([[0, 0], [np.inf, 0], [0, 4]]), (255, 255, 255)) == 0
    assert s.pixels.sum() == 0


def test_surface_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ArraySurface(0, 10)


def test_present_callback_can_be_swapped_and_removed() -> None:
    seen: list[int] = []
    s = ArraySurface(3, 2)
    s.present()
    s.set_present_callback(lambda frame: seen.append(int(frame[0, 0, 0])))
    s.clear((7, 0, 0))
    s.present()
    s.set_present_callback(None)
    s.present()
    assert seen == [7]
    assert s.presented == 3
