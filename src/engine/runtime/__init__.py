"""
どこで: `engine.runtime` サブパッケージ。
何を: DrawQueue/TickGate/FrameLatch/ActorWorkerPool による Actor スレッドと描画スレッドの受け渡し。
なぜ: シミュレーションと描画の責務を分離し、1 フレーム 1 ステップの歩調合わせと例外伝播を両立するため。
"""
