"""
どこで: `api.chase`（実行ランナー）。
何を: 設定からカーチェイスのシーンを組み立て、pyglet ウィンドウで表示するか、
      ヘッドレスで指定フレーム数を PNG 連番に書き出す。
なぜ: ウィンドウ/ヘッドレスで同じ `SceneDirector` と `FrameClock` を使い、描画結果を揃えるため。

実行フロー（概要）:
1) 設定解決: `util.utils.load_config()` を読み、引数で上書き（FPS/サーフェス/倍率/ワーカ数/シード）。
2) 組み立て: `scene.build_scene()` が Mesh・Actor・背景・レンダラ・ワーカプールを結線する。
3) フレーム駆動: `FrameClock([director])` を
   - ウィンドウ時は `pyglet.clock.schedule_interval(clock.tick, 1 / fps)` で、
   - ヘッドレス時は単純なループで呼ぶ。
4) 提示: ウィンドウは `ArraySurface.front()` を `ImageData` として拡大転送、ヘッドレスは
   `engine.export.image.save_png()` で保存する。
5) 終了: `ESC`/ウィンドウを閉じる/規定フレーム到達でワーカを停止する。

例:
    from api import run_chase

    run_chase(headless=True, frames=30, out_dir=Path("out"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from common.logging import setup_default_logging
from engine.core.frame_clock import FrameClock
from engine.render.surface import ArraySurface
from scene import SceneDirector, build_scene

from .chase_runner.utils import resolve_fps, resolve_scale, resolve_surface_size

logger = logging.getLogger(__name__)


def create_director(
    config: Mapping[str, Any] | None = None,
    *,
    workers: int | None = None,
    seed: int | None = None,
) -> SceneDirector:
    """設定（省略時は `load_config()`）からシーンを組み立てる。"""
    if config is None:
        from util.utils import load_config

        config = load_config()
    width, height = resolve_surface_size(config)
    surface = ArraySurface(width, height)
    return build_scene(config, surface, workers=workers, seed=seed)


def run_chase(
    *,
    headless: bool = False,
    frames: int | None = None,
    out_dir: Path | str | None = None,
    fps: int | None = None,
    scale: float | None = None,
    workers: int | None = None,
    seed: int | None = None,
    config: Mapping[str, Any] | None = None,
) -> list[Path]:
    """カーチェイスを実行する。

    Parameters
    ----------
    headless : bool, default False
        True でウィンドウを開かず、`frames` 枚を PNG として `out_dir` に書き出す。
    frames : int | None
        描画フレーム数。ヘッドレスの既定は 60、ウィンドウ時の None は閉じるまで。
    out_dir : Path | str | None
        PNG の出力先。None で `data/frames/`。
    fps : int | None
        フレームレート。None で設定ファイル（なければ 30）。
    scale : float | None
        ウィンドウ表示倍率。None で `surface.scale`。
    workers : int | None
        Actor ワーカ数。None で Actor 数、0 でインライン実行。
    seed : int | None
        先頭車の状態遷移に使う乱数シード。

    Returns
    -------
    list[Path]
        ヘッドレス時に保存した PNG のパス（ウィンドウ時は空）。
    """
    setup_default_logging()
    if config is None:
        from util.utils import load_config

        config = load_config()
    fps = resolve_fps(fps, config)
    director = create_director(config, workers=workers, seed=seed)

    if headless:
        return _run_headless(director, frames=60 if frames is None else frames, out_dir=out_dir, fps=fps)
    _run_window(director, frames=frames, fps=fps, scale=resolve_scale(scale, config))
    return []


def _run_headless(
    director: SceneDirector, *, frames: int, out_dir: Path | str | None, fps: int
) -> list[Path]:
    from engine.export.image import frame_path, save_png

    if frames < 0:
        raise ValueError(f"frames must be >= 0, got {frames}")
    target = Path(out_dir) if out_dir is not None else None
    clock = FrameClock([director])
    saved: list[Path] = []
    try:
        for i in range(frames):
            clock.tick(1.0 / fps)
            saved.append(save_png(director.surface, frame_path(i, target)))
    finally:
        director.close()
    logger.info(
        "wrote %d frame(s) (%.2f s simulated) to %s",
        len(saved),
        clock.elapsed,
        saved[0].parent if saved else target,
    )
    return saved


def _run_window(director: SceneDirector, *, frames: int | None, fps: int, scale: float) -> None:
    # 遅延インポート（ヘッドレス環境でのウィンドウ生成を避ける）
    import pyglet
    from pyglet.window import key

    surface = director.surface
    width = max(1, int(round(surface.width * scale)))
    height = max(1, int(round(surface.height * scale)))
    window = pyglet.window.Window(width=width, height=height, caption="Chase")
    clock = FrameClock([director])

    def _tick(dt: float) -> None:
        clock.tick(dt)
        if frames is not None and clock.frames >= frames:
            pyglet.clock.unschedule(_tick)
            window.close()

    # present() のたびに転送用画像を作り直し、on_draw は直近のものを貼るだけ
    latest: list[pyglet.image.ImageData | None] = [None]

    def _on_present(frame) -> None:  # noqa: ANN001
        h, w = frame.shape[:2]
        # 行 0 が上端なので負のピッチで上下を反転して渡す
        latest[0] = pyglet.image.ImageData(w, h, "RGB", frame.tobytes(), pitch=-w * 3)

    surface.set_present_callback(_on_present)  # type: ignore[attr-defined]

    @window.event
    def on_draw():  # noqa: ANN001
        window.clear()
        if latest[0] is not None:
            latest[0].blit(0, 0, width=window.width, height=window.height)

    @window.event
    def on_key_press(sym, mods):  # noqa: ANN001
        if sym == key.ESCAPE:
            window.close()

    @window.event
    def on_close():  # noqa: ANN001
        pyglet.clock.unschedule(_tick)
        director.close()
        pyglet.app.exit()

    pyglet.clock.schedule_interval(_tick, 1 / fps)
    try:
        pyglet.app.run()
    finally:
        director.close()


__all__ = ["create_director", "run_chase"]
