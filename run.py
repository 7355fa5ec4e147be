# run.py

import logging
import os

from agendaai import create_app # agendaaiパッケージからcreate_app関数をインポート

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

# アプリケーションインスタンスを作成
flask_app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 5000))
    # debug は開発時のみ。環境変数 FLASK_DEBUG で制御。
    # ワークスペースはプロセス内の状態なので、リローダーは使わない
    flask_app.run(host='0.0.0.0', port=port, debug=os.environ.get("FLASK_DEBUG") == "1", use_reloader=False)
