"""
どこで: `engine.core` サブパッケージ。
何を: 数学プリミティブ・不変 Mesh・カメラ・フレーム駆動（Tickable/FrameClock）を提供。
なぜ: 計算と描画の基盤を構成し、上位層（Runtime/Render/Scene）から再利用可能にするため。
"""
