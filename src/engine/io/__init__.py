"""
どこで: `engine.io` サブパッケージ（アセット入力）。
何を: OBJ ジオメトリ + テクスチャ画像から不変 `Mesh` を生成するローダ。
なぜ: ファイル形式依存を隔離し、Scene からは `load_mesh()` だけを参照させるため。
"""

from .obj_loader import MeshLoadError, load_mesh, parse_obj

__all__ = ["MeshLoadError", "load_mesh", "parse_obj"]
