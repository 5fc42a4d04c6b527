"""
どこで: `engine.render` サブパッケージ。
何を: pyglet によるキャンバスサーフェスと描画ウィンドウ。
なぜ: 操作キューの契約（engine.canvas）と実ウィンドウ描画の依存を分離するため。

pyglet はここでのみ import する（ヘッドレス環境では `api.runner` から遅延 import）。
"""
