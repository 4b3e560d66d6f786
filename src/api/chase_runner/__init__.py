"""
どこで: `api.chase_runner`。
何を: `api.chase` から切り出した純粋関数群（FPS/サーフェスサイズの解決）。
"""
