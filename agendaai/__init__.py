# agendaai/__init__.py

import os
from flask import Flask, jsonify
from dotenv import load_dotenv

from agendaai import gemini
from agendaai.errors import AgendaAIError

# .envファイルの読み込みをここで行う
load_dotenv()

DEFAULTS = {
    'SECRET_AUTH_KEY': 'mysecretkey_app_init_default',
    'AGENDA_MODEL': 'gemini-2.0-flash',
    'CHAT_MODEL': 'gemini-2.0-flash',
    'GENERATION_TEMPERATURE': 0.3,
    'MEETING_START': '09:00',
    'MAX_UPLOAD_MB': 20,
}


def _load_config(app_instance, overrides=None):
    """環境変数 (と .env) から設定を読み込む。overrides はテスト用。"""
    for key, default in DEFAULTS.items():
        value = os.environ.get(key, default)
        if isinstance(default, float):
            value = float(value)
        elif isinstance(default, int):
            value = int(value)
        app_instance.config[key] = value
    app_instance.config['GOOGLE_GEN_AI_API_KEY'] = os.environ.get('GOOGLE_GEN_AI_API_KEY')

    if overrides:
        app_instance.config.update(overrides)

    app_instance.config['MAX_CONTENT_LENGTH'] = int(app_instance.config['MAX_UPLOAD_MB']) * 1024 * 1024


def _build_workspace(app_instance):
    from agendaai.agenda.generator import AgendaGenerator
    from agendaai.chat.session import AgendaChatSession
    from agendaai.workspace import AgendaWorkspace

    api_key = app_instance.config.get('GOOGLE_GEN_AI_API_KEY')
    generator = AgendaGenerator(
        api_key=api_key,
        model_name=app_instance.config['AGENDA_MODEL'],
        temperature=app_instance.config['GENERATION_TEMPERATURE'],
    )

    def chat_factory(data, mime_type, analysis):
        return AgendaChatSession(
            data, mime_type, analysis,
            api_key=api_key,
            model_name=app_instance.config['CHAT_MODEL'],
        )

    return AgendaWorkspace(generator, chat_factory)


def create_app(config=None, workspace=None):
    app_instance = Flask(__name__)

    # --- 設定の読み込み ---
    _load_config(app_instance, config)

    # --- Google Generative AI クライアントの初期化 ---
    if not gemini.configure(app_instance.config.get('GOOGLE_GEN_AI_API_KEY')):
        app_instance.logger.warning("GOOGLE_GEN_AI_API_KEY not found. Generative AI features may not work.")

    # --- ワークスペース (アクティブなドキュメント1件分の状態) ---
    # テストでは workspace 引数で差し替えられる
    app_instance.workspace = workspace or _build_workspace(app_instance)

    # --- エラーハンドラ ---
    @app_instance.errorhandler(AgendaAIError)
    def handle_agenda_error(error):
        app_instance.logger.warning(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app_instance.errorhandler(413)
    def handle_too_large(error):
        limit = app_instance.config['MAX_UPLOAD_MB']
        return jsonify({"message": f"The file is too large. The limit is {limit} MB."}), 413

    # --- Blueprintの登録 ---
    from .main import main_bp
    app_instance.register_blueprint(main_bp)

    from .agenda import bp as agenda_bp
    app_instance.register_blueprint(agenda_bp, url_prefix='/agenda')

    from .chat import bp as chat_bp
    app_instance.register_blueprint(chat_bp, url_prefix='/chat')

    return app_instance
