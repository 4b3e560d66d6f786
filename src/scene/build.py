"""
どこで: `scene.build`。
何を: 設定辞書（`configs/default.yaml` 由来）から Mesh/Actor/背景/レンダラ/ワーカプールを組み立てて
      `SceneDirector` を返す。
なぜ: 組み立て手順と既定値を 1 箇所に集め、ウィンドウ実行/ヘッドレス/テストで同じシーンを作るため。

アセット:
- `assets.<role>.obj`（+ 任意の `texture`）があれば OBJ を読む。読めなければ `MeshLoadError` を
  そのまま呼び出し側へ送出する（プロセスは終了しない）。
- 無ければ手続き的な形状とテクスチャで代用する。
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from common import settings as _settings
from engine.core.camera import Camera
from engine.core.mesh import Mesh
from engine.core.primitives import (
    box_mesh,
    checker_texture,
    ground_strip_mesh,
    sky_backdrop_mesh,
    stripe_texture,
)
from engine.io import load_mesh
from engine.render.renderer import SoftwareRenderer
from engine.render.surface import ArraySurface, Surface
from engine.runtime.draw_queue import DrawQueue
from engine.runtime.worker import ActorWorkerPool
from util.color import normalize_color
from util.utils import resolve_path
from vehicles import Actor, make_behavior

from .backdrop import HILLS_LAYER, ROAD_LAYER, SKY_LAYER, Backdrop
from .director import CLEAR_COLOR, SceneDirector

logger = logging.getLogger(__name__)

DEFAULT_SURFACE = (320, 240)
DEFAULT_PURSUERS = 2
PURSUER_SPACING = 3.0
PURSUER_START_Z = -10.0


def pursuer_spawn(index: int, count: int) -> tuple[float, float, float]:
    """i 台目の追跡車の初期位置 `((i - n // 2) * 3, 0, -10)`。"""
    return ((index - count // 2) * PURSUER_SPACING, 0.0, PURSUER_START_Z)


def _procedural_mesh(role: str) -> Mesh:
    if role == "lead":
        return box_mesh(texture=checker_texture(32, 4, ((250, 210, 20), (30, 30, 30))), name="lead")
    if role == "pursuer":
        return box_mesh(texture=checker_texture(32, 2, ((240, 240, 240), (20, 20, 60))), name="pursuer")
    if role == "sky":
        return sky_backdrop_mesh(texture=stripe_texture(64, 64, 3, ((90, 160, 235), (120, 185, 245))))
    if role == "hills":
        return ground_strip_mesh(
            90.0, 160.0, 8.0, height=-0.05,
            texture=checker_texture(64, 8, ((60, 140, 60), (80, 160, 70))), name="hills",
        )
    if role == "road":
        return ground_strip_mesh(texture=stripe_texture(64, 64, 4), name="road")
    raise KeyError(f"unknown mesh role: {role!r}")


def load_role_mesh(role: str, assets: Mapping[str, Any] | None) -> Mesh:
    """役割ごとの Mesh を解決する（OBJ 指定があれば読み込み、無ければ手続き生成）。"""
    entry = (assets or {}).get(role)
    if not entry:
        return _procedural_mesh(role)
    if not isinstance(entry, Mapping) or "obj" not in entry:
        raise ValueError(f"assets.{role} must be a mapping with an 'obj' path, got {entry!r}")
    obj_path = resolve_path(entry["obj"])
    texture_path = resolve_path(entry.get("texture"))
    return load_mesh(obj_path, texture_path)  # type: ignore[arg-type]


def _int_option(config: Mapping[str, Any], key: str, default: int, *, min_value: int = 0) -> int:
    raw = config.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"config '{key}' must be an integer, got {raw!r}") from e
    if value < min_value:
        raise ValueError(f"config '{key}' must be >= {min_value}, got {value}")
    return value


def resolve_workers(config: Mapping[str, Any], workers: int | None = None) -> int | None:
    """ワーカ数の解決（引数 > `CHASE_WORKERS` > 設定 > None=Actor 数）。"""
    if workers is not None:
        return max(0, int(workers))
    env = _settings.get().WORKERS
    if env is not None:
        return env
    if config.get("workers") is None:
        return None
    return _int_option(config, "workers", 0)


def resolve_seed(config: Mapping[str, Any], seed: int | None = None) -> int | None:
    if seed is not None:
        return int(seed)
    env = _settings.get().SEED
    if env is not None:
        return env
    raw = config.get("seed")
    return None if raw is None else _int_option(config, "seed", 0)


def build_scene(
    config: Mapping[str, Any] | None = None,
    surface: Surface | None = None,
    *,
    workers: int | None = None,
    seed: int | None = None,
) -> SceneDirector:
    """設定からシーンを組み立てる。ワーカはまだ起動しない（初回 `tick()`/`start()` で起動）。

    例外:
        MeshLoadError: アセットの読み込みに失敗した場合。
        ValueError: 設定値が不正な場合。
    """
    cfg: Mapping[str, Any] = config or {}
    if surface is None:
        scfg = cfg.get("surface") or {}
        width = int(scfg.get("width", DEFAULT_SURFACE[0]))
        height = int(scfg.get("height", DEFAULT_SURFACE[1]))
        surface = ArraySurface(width, height)

    colors = cfg.get("colors") or {}
    clear_color = normalize_color(colors.get("clear", CLEAR_COLOR))
    fill_color = normalize_color(colors.get("fill", clear_color))

    assets = cfg.get("assets") or {}
    lead_mesh = load_role_mesh("lead", assets)
    pursuer_mesh = load_role_mesh("pursuer", assets)
    backdrops = [
        Backdrop("sky", load_role_mesh("sky", assets), anchor="follow", layer=SKY_LAYER),
        Backdrop("hills", load_role_mesh("hills", assets), anchor="tile", layer=HILLS_LAYER),
        Backdrop("road", load_role_mesh("road", assets), anchor="tile", layer=ROAD_LAYER),
    ]

    rng = np.random.default_rng(resolve_seed(cfg, seed))
    lead = Actor("lead", lead_mesh, make_behavior("lead", rng=rng))
    count = _int_option(cfg, "pursuers", DEFAULT_PURSUERS)
    pursuers = [
        Actor(
            f"pursuer-{i}",
            pursuer_mesh,
            make_behavior("pursuer"),
            position=pursuer_spawn(i, count),
        )
        for i in range(count)
    ]

    queue = DrawQueue()
    camera = Camera()
    renderer = SoftwareRenderer(surface, queue, camera, default_fill=fill_color)
    pool = ActorWorkerPool([lead, *pursuers], queue, workers=resolve_workers(cfg, workers))
    logger.info(
        "built scene: surface=%dx%d pursuers=%d workers=%s",
        surface.width,
        surface.height,
        count,
        "inline" if pool.inline else pool.worker_count,
    )
    return SceneDirector(
        lead=lead,
        pursuers=pursuers,
        backdrops=backdrops,
        surface=surface,
        queue=queue,
        camera=camera,
        renderer=renderer,
        pool=pool,
        clear_color=clear_color,
        sync=bool(cfg.get("sync", False)) or _settings.get().SYNC,
    )


__all__ = ["build_scene", "load_role_mesh", "pursuer_spawn", "resolve_seed", "resolve_workers"]
