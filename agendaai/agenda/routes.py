# agendaai/agenda/routes.py

from flask import current_app, jsonify, request

from agendaai import ingestion
from agendaai.agenda.models import AnalysisResult
from agendaai.auth import authenticate_request
from agendaai.errors import GenerationError, ValidationError
from agendaai.rendering import format_agenda_text
from agendaai.timeline import build_timeline, meeting_end, parse_start
from agendaai.workspace import GENERATION_FAILED_MESSAGE

from . import bp


def _meeting_start():
    return parse_start(current_app.config['MEETING_START'])


def _analysis_payload(analysis: AnalysisResult) -> dict:
    start = _meeting_start()
    return {
        "analysis": analysis.to_dict(),
        "timeline": [slot.to_dict() for slot in build_timeline(analysis.agenda, start)],
        "meeting_end": meeting_end(analysis.agenda, start),
        "total_minutes": analysis.total_minutes,
    }


def _uploaded_file_from_request() -> ingestion.UploadedFile:
    """multipart の 'file'、または JSON {name, mime_type, data} を UploadedFile に変換する。"""
    if 'file' in request.files:
        return ingestion.from_storage(request.files['file'])

    data = request.get_json(silent=True)
    if not data or 'data' not in data:
        raise ValidationError("Invalid request body: a multipart 'file' or JSON 'data' is required")
    if not isinstance(data['data'], str):
        raise ValidationError("Invalid request body: 'data' must be a base64 string")
    size = data.get('size')
    return ingestion.from_base64(
        data.get('name') or 'document',
        data['data'],
        mime_type=data.get('mime_type') or data.get('mimeType'),
        size=size if isinstance(size, int) else None,
    )


# --- アップロードエンドポイント ---
@bp.route('/upload', methods=['POST'])
@authenticate_request
def upload_document():
    """
    ドキュメントを受け取り、Geminiでアジェンダを生成して返すエンドポイント。
    生成中にファイルがクリアされた場合、結果は破棄される。
    """
    uploaded = _uploaded_file_from_request()
    workspace = current_app.workspace

    if not ingestion.is_accepted_type(uploaded.name, uploaded.mime_type):
        current_app.logger.warning(f"Uploading '{uploaded.name}' with unusual type {uploaded.mime_type}.")

    try:
        result = workspace.upload(uploaded)
    except GenerationError as e:
        current_app.logger.error(f"Error generating agenda for '{uploaded.name}': {e.message}")
        return jsonify({
            "message": workspace.status()["error"] or GENERATION_FAILED_MESSAGE,
            "details": e.to_dict(),
        }), e.status_code

    if result is None:
        return jsonify({
            "message": "The document was cleared or replaced before analysis finished. The result was discarded.",
            "discarded": True,
        }), 409

    payload = {"message": "Agenda generated", "file": uploaded.to_dict()}
    payload.update(_analysis_payload(result))
    return jsonify(payload), 200


@bp.route('', methods=['GET'])
@authenticate_request
def get_agenda():
    """
    現在のアジェンダを返す。?format=text でプレーンテキスト。
    """
    analysis = current_app.workspace.current_analysis()
    if analysis is None:
        return jsonify({"message": "No agenda has been generated yet."}), 404

    if request.args.get('format') == 'text':
        text = format_agenda_text(analysis, _meeting_start())
        return current_app.response_class(text, mimetype='text/plain')

    return jsonify(_analysis_payload(analysis)), 200


@bp.route('', methods=['DELETE'])
@authenticate_request
def clear_document():
    """
    ファイルと解析結果、チャットをまとめてクリアする。
    """
    current_app.workspace.clear()
    return jsonify({"message": "Document cleared"}), 200
