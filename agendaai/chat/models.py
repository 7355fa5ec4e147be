# agendaai/chat/models.py

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

USER = 'user'
MODEL = 'model'


def _new_message_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ChatMessage:
    """チャットの1メッセージ。トランスクリプトに追加した後は変更しない。"""
    role: str # 'user' または 'model'
    text: str
    id: str = field(default_factory=_new_message_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.role not in (USER, MODEL):
            raise ValueError(f"Unknown chat role: {self.role}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


def is_first_user_turn(transcript: Iterable[ChatMessage]) -> bool:
    """
    これから送るメッセージがユーザーの最初の発言かどうか。
    カウンタは持たず、送信時点のトランスクリプトから毎回判定する。
    """
    return not any(message.role == USER for message in transcript)
