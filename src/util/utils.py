"""
どこで: `util.utils`。
何を: プロジェクトルートの推定、YAML 設定の読み込み（フェイルソフト）、設定内パスの解決。
なぜ: 実行時のカレントディレクトリに依らず `configs/` と `asset/` を同じ基準で見つけるため。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 上から順に、最初に見つかった配置をルートとみなす
_ROOT_MARKERS = ("pyproject.toml", "configs", ".git")
# 後ろほど優先（トップレベルキー単位で上書き）
CONFIG_LAYERS = (Path("configs") / "default.yaml", Path("config.yaml"))


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: top level is %s, not a mapping", path, type(data).__name__)
        return {}
    return data


def project_root() -> Path:
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    # <repo>/src/util/utils.py
    return here.parent.parent


def load_config() -> dict[str, Any]:
    """`configs/default.yaml` に ルート `config.yaml` を重ねた辞書を返す。

    読めない/辞書でないファイルは警告して無視する。ネストした辞書はマージしない。
    """
    root = project_root()
    merged: dict[str, Any] = {}
    for layer in CONFIG_LAYERS:
        merged.update(_read_mapping(root / layer))
    return merged


def resolve_path(value: str | Path | None) -> Path | None:
    """設定値のパスを解決する。相対パスはプロジェクトルート基準、`~` は展開する。"""
    if value is None:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else project_root() / path


__all__ = ["CONFIG_LAYERS", "project_root", "load_config", "resolve_path"]
