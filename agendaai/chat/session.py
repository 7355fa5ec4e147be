# agendaai/chat/session.py

import logging
from typing import Optional

import google.generativeai as genai

from agendaai import gemini
from agendaai.agenda.models import AnalysisResult
from agendaai.errors import AgendaAIError, ChatError

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = 'gemini-2.0-flash'


def build_system_instruction(analysis: Optional[AnalysisResult]) -> str:
    title = analysis.title if analysis and analysis.title else 'Unknown'
    summary = analysis.summary if analysis and analysis.summary else 'N/A'
    return f"""You are a helpful AI meeting assistant.
The user has uploaded a document which has been analyzed into a meeting agenda.

Meeting Context:
Title: {title}
Summary: {summary}

Answer questions based on the uploaded document content and the generated agenda.
Be concise, professional, and helpful."""


class AgendaChatSession:
    """
    1つのドキュメント+解析結果に紐づくチャットセッション。
    ドキュメントや解析結果が変わった場合は、このオブジェクトを作り直すこと。
    """

    def __init__(self, data: str, mime_type: str, analysis: Optional[AnalysisResult] = None,
                 api_key: Optional[str] = None, model_name: str = DEFAULT_CHAT_MODEL):
        self.data = data
        self.mime_type = mime_type
        self.analysis = analysis
        self.api_key = api_key
        self.model_name = model_name
        self.system_instruction = build_system_instruction(analysis)
        self._chat = None

    def _chat_handle(self):
        # SDKのチャットは最初の送信時に作成する
        if self._chat is None:
            gemini.ensure_configured(self.api_key)
            model = genai.GenerativeModel(self.model_name, system_instruction=self.system_instruction)
            self._chat = model.start_chat()
        return self._chat

    def build_parts(self, text: str, is_first_turn: bool = False) -> list:
        """
        送信するパーツを組み立てる。
        最初のターンのみドキュメント本体を添付する (システム指示にはタイトルと要約しか含まれないため)。
        """
        parts = [text]
        if is_first_turn:
            parts.insert(0, gemini.inline_document(self.data, self.mime_type))
        return parts

    def send_message(self, text: str, is_first_turn: bool = False) -> Optional[str]:
        """ユーザーの発言を送り、モデルの返答テキストを返す。本文が無い場合は None。"""
        try:
            chat = self._chat_handle()
            response = chat.send_message(self.build_parts(text, is_first_turn))
        except AgendaAIError as e:
            raise ChatError(e.message, details=e.details) from e
        except Exception as e:
            logger.error(f"Chat error: {e}", exc_info=True)
            raise ChatError("The chat message could not be processed.", details={"error": str(e)}) from e

        reply = gemini.response_text(response)
        if reply is None:
            logger.info("Chat response contained no text.")
        return reply
