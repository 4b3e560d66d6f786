"""
どこで: `common` パッケージ。
何を: 下位層の共通部品（名前レジストリ、`CHASE_*` 設定、ロギング初期化、ベクトル型）。
なぜ: vehicles/scene/engine のどこからでも循環なしに参照できる位置に置くため。
"""

from .base_registry import BaseRegistry
from .types import RGB, ZERO3, Vec3, as_vec3

__all__ = ["BaseRegistry", "RGB", "Vec3", "ZERO3", "as_vec3"]
