"""
どこで: `util.color`。
何を: 設定ファイル/引数で受け取った色を Surface が使う 8bit RGB タプルへ正規化する。
なぜ: `colors.clear` / `colors.fill` / `Surface.clear()` で受理形式とエラーを揃えるため。

受理形式:
- Hex 文字列: "#RRGGBB", "0xRRGGBB", "RRGGBB"（末尾 AA 付きも可。Surface は不透明なので無視）。
- (r, g, b[, a]) の list/tuple: 全要素が 0–1 の float なら単位系、それ以外は 0–255 とみなしクランプ。
"""

from __future__ import annotations

import re

from common.types import RGB

_HEX = re.compile(r"(?:#|0[xX])?(?P<rgb>[0-9a-fA-F]{6})(?:[0-9a-fA-F]{2})?")


def parse_hex_color_str(s: str) -> RGB:
    m = _HEX.fullmatch(s.strip())
    if m is None:
        raise ValueError(f"invalid hex color: {s!r} (expected RRGGBB or RRGGBBAA)")
    r, g, b = bytes.fromhex(m.group("rgb"))
    return (r, g, b)


def _to_byte(c: float) -> int:
    return max(0, min(255, int(round(c))))


def normalize_color(value: object) -> RGB:
    if isinstance(value, str):
        return parse_hex_color_str(value)
    if not isinstance(value, (list, tuple)) or len(value) not in (3, 4):
        raise ValueError(f"color must be a hex string or 3/4 components, got {value!r}")
    head = value[:3]
    try:
        comps = [float(c) for c in head]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color components: {value!r}") from e
    if all(isinstance(c, float) for c in head) and all(0.0 <= c <= 1.0 for c in comps):
        comps = [c * 255.0 for c in comps]
    r, g, b = (_to_byte(c) for c in comps)
    return (r, g, b)


__all__ = ["normalize_color", "parse_hex_color_str"]
