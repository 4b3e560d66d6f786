"""共通フィクスチャ。

- 乱数シード固定
- 小さな Mesh 試料（単色三角形 / 単色テクスチャ三角形）
- 環境変数設定の後始末
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

from common import settings
from engine.core.mesh import Mesh
from tests._utils.meshes import solid_texture, triangle_mesh


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def tri_mesh() -> Mesh:
    return triangle_mesh()


@pytest.fixture()
def red_tri_mesh() -> Mesh:
    return triangle_mesh(texture=solid_texture((255, 0, 0)), name="red")


@pytest.fixture()
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """`CHASE_*` を外した状態で設定を読み直し、終了後も読み直す。"""
    for name in ("CHASE_WORKERS", "CHASE_SEED", "CHASE_SYNC", "CHASE_NEAR_CUTOFF", "CHASE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings.reload_from_env()
    yield monkeypatch
    monkeypatch.undo()
    settings.reload_from_env()
