"""
どこで: `common` の型定義。
何を: Vec3/RGB などの軽量エイリアス（組込みジェネリックで記述）。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。
"""

Vec3 = tuple[float, float, float]
RGB = tuple[int, int, int]

ZERO3: Vec3 = (0.0, 0.0, 0.0)


def as_vec3(value: object) -> Vec3:
    """長さ 3 のシーケンスを float の Vec3 タプルへ正規化する。"""
    try:
        x, y, z = value  # type: ignore[misc]
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected a 3-vector, got {value!r}") from e
    return (float(x), float(y), float(z))


__all__ = ["Vec3", "RGB", "ZERO3", "as_vec3"]
