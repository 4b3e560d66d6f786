"""
どこで: `api` 入口（高レベル公開 API）。
何を: 実行ランナー `run_chase` とシーン組み立て `create_director` を再輸出。

Usage:
    from api import run_chase

    run_chase()                                # ウィンドウ表示（ESC で終了）
    run_chase(headless=True, frames=120)       # data/frames/ に PNG 連番
"""

from .chase import create_director, run_chase
from .chase import run_chase as run

__all__ = ["create_director", "run", "run_chase"]
