# agendaai/chat/routes.py

from flask import current_app, jsonify, request

from agendaai.auth import authenticate_request
from agendaai.errors import ValidationError

from . import bp


@bp.route('/messages', methods=['GET'])
@authenticate_request
def list_messages():
    messages = current_app.workspace.transcript()
    return jsonify({"messages": [m.to_dict() for m in messages]}), 200


@bp.route('/messages', methods=['POST'])
@authenticate_request
def send_message():
    """
    ユーザーの質問を送り、トランスクリプトに追加されたメッセージを返すエンドポイント。
    モデル側のエラーは 200 でお詫びメッセージとして返る。
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data.get('text'), str):
        raise ValidationError("Invalid request body: 'text' is required")

    appended = current_app.workspace.send_chat(data['text'])
    if not appended:
        return jsonify({
            "message": "The document was cleared or replaced before the reply arrived. The reply was discarded.",
            "discarded": True,
        }), 409
    current_app.logger.info(f"Chat turn completed with {len(appended)} new message(s).")
    return jsonify({"messages": [m.to_dict() for m in appended]}), 200
