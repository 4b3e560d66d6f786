from __future__ import annotations

import math

import numpy as np
import pytest

from engine.core import math3d as m3


def test_normalize_unit_length_and_zero_vector() -> None:
    v = m3.normalize((3.0, 4.0, 12.0))
    assert m3.magnitude(v) == pytest.approx(1.0)
    np.testing.assert_allclose(v, np.array([3.0, 4.0, 12.0]) / 13.0)
    with pytest.raises(ValueError):
        m3.normalize((0.0, 0.0, 0.0))


def test_translate_uses_last_row_with_row_vectors() -> None:
    m = m3.translate((1.0, 2.0, 3.0))
    p = m3.transform_points(np.array([[0.0, 0.0, 0.0]]), m)
    np.testing.assert_allclose(p[0], [1.0, 2.0, 3.0, 1.0])
    assert m[3, 0] == 1.0 and m[0, 3] == 0.0


def test_mat4_mul_applies_left_to_right() -> None:
    # 先に回転、その後に平行移動
    m = m3.mat4_mul(m3.rotate_y(math.pi / 2.0), m3.translate((10.0, 0.0, 0.0)))
    p = m3.transform_points(np.array([[1.0, 0.0, 0.0]]), m)
    np.testing.assert_allclose(p[0, :3], [10.0, 0.0, 1.0], atol=1e-12)


def test_world_transform_composition_order() -> None:
    pos, rot = (1.0, 2.0, 3.0), (0.3, -0.7, 0.2)
    expected = (
        m3.rotate_y(rot[1]) @ m3.rotate_z(rot[2]) @ m3.rotate_x(rot[0]) @ m3.translate(pos)
    )
    np.testing.assert_allclose(m3.world_transform(pos, rot), expected)


def test_inverse_roundtrip_and_singular() -> None:
    m = m3.world_transform((1.0, -2.0, 0.5), (0.1, 0.2, 0.3)) @ m3.scale((2.0, 3.0, 0.5))
    np.testing.assert_allclose(m @ m3.inverse(m), np.eye(4), atol=1e-9)
    with pytest.raises(m3.SingularMatrixError):
        m3.inverse(np.zeros((3, 3)))


def test_look_at_puts_target_on_negative_z() -> None:
    view = m3.look_at((0.0, 0.0, 10.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    p = m3.transform_points(np.array([[0.0, 0.0, 0.0]]), view)
    np.testing.assert_allclose(p[0, :3], [0.0, 0.0, -10.0], atol=1e-12)


def test_perspective_keeps_view_depth_in_w() -> None:
    proj = m3.perspective(math.radians(70.0), 4.0 / 3.0, 0.0, 1.0)
    p = m3.transform_points(np.array([[0.0, 0.0, -7.5]]), proj)
    assert p[0, 3] == pytest.approx(7.5)
    with pytest.raises(ValueError):
        m3.perspective(1.0, 0.0, 0.0, 1.0)
    with pytest.raises(ValueError):
        m3.perspective(1.0, 1.0, 1.0, 1.0)


def test_to_pixel_space_corners() -> None:
    m = m3.to_pixel_space(200, 100)
    p = m3.transform_points(np.array([[-1.0, 1.0, 0.0], [1.0, -1.0, 0.0]]), m)
    np.testing.assert_allclose(p[:, :2], [[0.0, 0.0], [200.0, 100.0]])


def test_affine_from_unit_triangle_reproduces_target() -> None:
    unit = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    target = np.array([[10.0, 20.0], [35.0, 22.0], [12.0, 60.0]])
    a = m3.affine_from_triangles(unit, target)
    np.testing.assert_allclose(m3.apply_affine(a, unit), target, atol=1e-9)
    np.testing.assert_allclose(a[2], [0.0, 0.0, 1.0], atol=1e-12)


def test_affine_from_degenerate_source_raises() -> None:
    collinear = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    with pytest.raises(m3.SingularMatrixError):
        m3.affine_from_triangles(collinear, np.eye(3)[:, :2])


def test_mat3_determinant() -> None:
    assert m3.mat3_determinant(np.diag([2.0, 3.0, 4.0])) == pytest.approx(24.0)
