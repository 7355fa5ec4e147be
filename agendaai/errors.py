# agendaai/errors.py

from typing import Any, Dict, Optional


class AgendaAIError(Exception):
    """アプリケーション全体のエラー基底クラス。HTTPステータスと詳細を保持する。"""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class IngestionError(AgendaAIError):
    """アップロードされたファイルが読めない、または空の場合。"""
    status_code = 400


class GenerationError(AgendaAIError):
    """アジェンダ生成の呼び出しが失敗した場合 (通信エラー・空レスポンス・不正なJSON)。"""
    status_code = 502


class ChatError(AgendaAIError):
    """チャットの1ターンが失敗した場合。セッション自体は引き続き利用可能。"""
    status_code = 502


class ValidationError(AgendaAIError):
    """リクエストボディが不正な場合。"""
    status_code = 400


class RequestInFlightError(AgendaAIError):
    """同じ種類のリクエストが処理中の場合。"""
    status_code = 409


class NoActiveDocumentError(AgendaAIError):
    """ドキュメントが未アップロード、または解析が完了していない場合。"""
    status_code = 409

    def __init__(self, message: str = "No analyzed document is active. Upload a document first.", **kwargs):
        super().__init__(message, **kwargs)


class ConfigurationError(AgendaAIError):
    """APIキーなどの設定が不足している場合。"""
    status_code = 500
