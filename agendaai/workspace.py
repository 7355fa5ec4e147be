# agendaai/workspace.py
"""
アップロード中のドキュメント1件分の状態 (ファイル・解析結果・チャット) を管理する。
Flaskはリクエストをスレッドで処理するため、状態の変更はロック内で行い、
外部APIの呼び出しはロックの外で行う。
"""

import logging
import threading
from typing import Callable, List, Optional

from agendaai.agenda.models import AnalysisResult
from agendaai.chat.models import MODEL, USER, ChatMessage, is_first_user_turn
from agendaai.errors import (
    ChatError,
    GenerationError,
    NoActiveDocumentError,
    RequestInFlightError,
    ValidationError,
)
from agendaai.ingestion import UploadedFile

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = (
    "Failed to analyze the document. Please try a different file or ensure it contains readable text."
)
CHAT_APOLOGY_MESSAGE = "I'm sorry, I encountered an error processing your request. Please try again."


def welcome_message(file_name: str) -> str:
    return (
        f'Hi! I\'ve analyzed "{file_name}". You can ask me questions about the agenda, '
        f'stakeholders, or specific details in the document.'
    )


class AgendaWorkspace:
    """
    generator: generate(data, mime_type) -> AnalysisResult を持つオブジェクト
    chat_factory: (data, mime_type, analysis) -> send_message(text, is_first_turn) を持つセッション
    """

    def __init__(self, generator, chat_factory: Callable):
        self.generator = generator
        self.chat_factory = chat_factory
        self._lock = threading.Lock()

        self.current_file: Optional[UploadedFile] = None
        self.analysis: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.chat_session = None
        self.messages: List[ChatMessage] = []
        self.is_processing = False
        self.is_sending = False
        # ファイル選択ごとに増やすトークン。古いレスポンスを捨てるために使う
        self._generation = 0

    # --- ドキュメント ---

    def _reset_document_locked(self):
        self.current_file = None
        self.analysis = None
        self.chat_session = None
        self.messages = []
        self.is_sending = False

    def upload(self, file: UploadedFile) -> Optional[AnalysisResult]:
        """
        ファイルを解析してアジェンダを生成する。
        途中でファイルがクリア・差し替えされた場合、結果は破棄して None を返す。
        """
        with self._lock:
            if self.is_processing:
                raise RequestInFlightError("A document is already being analyzed. Please wait.")
            self._reset_document_locked()
            self.error = None
            self.current_file = file
            self.is_processing = True
            self._generation += 1
            token = self._generation

        logger.info(f"Generating agenda for '{file.name}' ({file.mime_type}, {file.size_label})")
        try:
            result = self.generator.generate(file.data, file.mime_type)
            session = self.chat_factory(file.data, file.mime_type, result)
        except GenerationError:
            with self._lock:
                # クリア済みでも、生成中フラグは呼び出しが戻った時点で下ろす
                self.is_processing = False
                if token != self._generation:
                    logger.info(f"Discarding failed generation for '{file.name}' (document changed).")
                    return None
                self.error = GENERATION_FAILED_MESSAGE
                # エラー時はファイル選択をリセットして、すぐに再試行できるようにする
                self.current_file = None
            raise
        except Exception:
            with self._lock:
                self.is_processing = False
                if token == self._generation:
                    self.current_file = None
            raise

        with self._lock:
            self.is_processing = False
            if token != self._generation:
                logger.info(f"Discarding stale agenda for '{file.name}' (document changed).")
                return None
            self.analysis = result
            self.chat_session = session
            self.messages = [ChatMessage(role=MODEL, text=welcome_message(file.name))]
        return result

    def clear(self):
        """
        ファイルをクリアする。処理中の生成結果は、戻ってきても反映しない。
        生成中フラグはそのまま残し、呼び出しが戻るまで次のアップロードは受け付けない。
        """
        with self._lock:
            self._reset_document_locked()
            self.error = None
            self._generation += 1
        logger.info("Workspace cleared.")

    # --- チャット ---

    def send_chat(self, text: str) -> List[ChatMessage]:
        """
        ユーザーの発言を送信し、トランスクリプトに追加されたメッセージを返す。
        1ターンの失敗はお詫びメッセージに置き換え、セッションはそのまま使える。
        """
        if text is None or not text.strip():
            raise ValidationError("Message text must not be empty.")

        with self._lock:
            session = self.chat_session
            if session is None:
                raise NoActiveDocumentError()
            if self.is_sending:
                raise RequestInFlightError("A chat message is already being processed. Please wait.")
            is_first = is_first_user_turn(self.messages)
            user_message = ChatMessage(role=USER, text=text)
            self.messages.append(user_message)
            self.is_sending = True

        appended = [user_message]
        try:
            reply = session.send_message(text, is_first)
        except ChatError as e:
            logger.error(f"Chat turn failed: {e.message}")
            reply_message = ChatMessage(role=MODEL, text=CHAT_APOLOGY_MESSAGE)
        except Exception:
            with self._lock:
                if self.chat_session is session:
                    self.is_sending = False
            raise
        else:
            reply_message = ChatMessage(role=MODEL, text=reply) if reply else None

        with self._lock:
            if self.chat_session is not session:
                # 送信中にドキュメントが変わった
                logger.info("Discarding chat reply for a replaced session.")
                return []
            if reply_message is not None:
                self.messages.append(reply_message)
                appended.append(reply_message)
            self.is_sending = False
        return appended

    # --- 表示用 ---

    def current_analysis(self) -> Optional[AnalysisResult]:
        with self._lock:
            return self.analysis

    def transcript(self) -> List[ChatMessage]:
        with self._lock:
            return list(self.messages)

    def status(self) -> dict:
        with self._lock:
            return {
                "file": self.current_file.to_dict() if self.current_file else None,
                "has_analysis": self.analysis is not None,
                "is_processing": self.is_processing,
                "is_sending": self.is_sending,
                "error": self.error,
                "message_count": len(self.messages),
            }
