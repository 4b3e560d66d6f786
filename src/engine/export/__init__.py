"""
どこで: `engine.export`。
何を: 描画結果のファイル出力（PNG 連番）。
"""
