"""
どこで: `api.chase_runner.utils`（純粋関数/小ヘルパ）。
何を: FPS・サーフェスサイズ・表示倍率の解決。
なぜ: `api.chase` を薄く保ち、設定値の検証を単体でテストできるようにするため。
"""

from __future__ import annotations

from typing import Any, Mapping


def resolve_fps(
    requested_fps: int | None, config: Mapping[str, Any] | None = None, *, default: int = 30
) -> int:
    """FPS を解決して 1 以上の int を返す。

    - 明示指定があればそれを優先（<=0 は 1 へクランプ）。
    - それ以外は設定の `fps`、数値化できなければ既定値。
    """
    if requested_fps is not None:
        return max(1, int(requested_fps))
    raw = (config or {}).get("fps", default)
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        return max(1, int(default))


def resolve_surface_size(
    config: Mapping[str, Any] | None = None, *, default: tuple[int, int] = (320, 240)
) -> tuple[int, int]:
    """`surface.width/height` を解決する。正の整数でなければ `ValueError`。"""
    scfg = (config or {}).get("surface") or {}
    try:
        w = int(scfg.get("width", default[0]))
        h = int(scfg.get("height", default[1]))
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid surface size: {scfg!r}") from e
    if w <= 0 or h <= 0:
        raise ValueError(f"surface size must be positive, got: {(w, h)}")
    return w, h


def resolve_scale(
    requested: float | None, config: Mapping[str, Any] | None = None, *, default: float = 2.0
) -> float:
    """ウィンドウ表示倍率（サーフェス 1px を何 px で表示するか）。"""
    if requested is None:
        requested = ((config or {}).get("surface") or {}).get("scale", default)
    try:
        value = float(requested)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid surface scale: {requested!r}") from e
    if value <= 0.0:
        raise ValueError(f"surface scale must be > 0, got {value}")
    return value


__all__ = ["resolve_fps", "resolve_scale", "resolve_surface_size"]
