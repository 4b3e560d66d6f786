"""
どこで: `engine.render` サブパッケージ。
何を: DrawQueue → 投影 → 奥行き整列 → カリング → アフィンテクスチャ塗り（CPU のみ）の入口。
なぜ: 描画処理と Surface（numpy フレームバッファ）を一箇所に集約し、GPU 依存を持たないため。
"""
