# agendaai/main/routes.py

from flask import jsonify, current_app

from agendaai.auth import authenticate_request
from . import main_bp


@main_bp.route('/')
def index():
    """
    ヘルスチェック用エンドポイント (認証なし)。
    """
    return jsonify({"message": "AgendaAI is running"})


@main_bp.route('/status', methods=['GET'])
@authenticate_request
def workspace_status():
    """
    現在のワークスペースの状態 (ファイル・処理中フラグ・エラー) を返す。
    """
    return jsonify(current_app.workspace.status()), 200
