# agendaai/agenda/models.py

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class SchemaMismatch(ValueError):
    """モデルの出力が期待したJSON構造と一致しない場合。"""


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise SchemaMismatch(f"{where}: '{key}' is required and must be a string")
    return value


def _optional_str(data: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaMismatch(f"{where}: '{key}' must be a string")
    return value


def _require_list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if not isinstance(value, list):
        raise SchemaMismatch(f"'{key}' is required and must be an array")
    return value


@dataclass(frozen=True)
class Stakeholder:
    """会議に参加すべき人物。"""
    name: str
    role: str
    relevance: str # なぜ参加すべきか

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "Stakeholder":
        where = f"stakeholders[{index}]"
        if not isinstance(data, dict):
            raise SchemaMismatch(f"{where} must be an object")
        return cls(
            name=_require_str(data, 'name', where),
            role=_require_str(data, 'role', where),
            relevance=_require_str(data, 'relevance', where),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "role": self.role, "relevance": self.relevance}


@dataclass(frozen=True)
class AgendaItem:
    """アジェンダの1項目。リストの順番が会議の進行順。"""
    id: str
    topic: str
    duration_minutes: int # 見積もり時間 (分)
    description: str
    speaker: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "AgendaItem":
        where = f"agenda[{index}]"
        if not isinstance(data, dict):
            raise SchemaMismatch(f"{where} must be an object")
        duration = data.get('durationMinutes')
        # bool は int のサブクラスなので明示的に除外する
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise SchemaMismatch(f"{where}: 'durationMinutes' is required and must be an integer")
        if duration <= 0:
            raise SchemaMismatch(f"{where}: 'durationMinutes' must be positive, got {duration}")
        return cls(
            id=_require_str(data, 'id', where),
            topic=_require_str(data, 'topic', where),
            duration_minutes=duration,
            description=_require_str(data, 'description', where),
            speaker=_optional_str(data, 'speaker', where) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "durationMinutes": self.duration_minutes,
            "description": self.description,
            "speaker": self.speaker,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """ドキュメント解析の結果全体。生成に成功した場合のみ作られる。"""
    title: str # 会議のタイトル案
    summary: str # 会議の目的の要約
    stakeholders: List[Stakeholder] = field(default_factory=list)
    agenda: List[AgendaItem] = field(default_factory=list)
    date: Optional[str] = None # 日付、または "Next Monday" のような相対表現

    @classmethod
    def from_dict(cls, data: Any) -> "AnalysisResult":
        """
        モデルが返したJSONオブジェクトを検証して AnalysisResult を作成する。
        必須フィールドが欠けている場合はデフォルト値で埋めずに SchemaMismatch を送出する。
        """
        if not isinstance(data, dict):
            raise SchemaMismatch("response must be a JSON object")
        title = _require_str(data, 'title', 'analysis')
        summary = _require_str(data, 'summary', 'analysis')
        stakeholders = [Stakeholder.from_dict(s, i) for i, s in enumerate(_require_list(data, 'stakeholders'))]
        agenda = [AgendaItem.from_dict(a, i) for i, a in enumerate(_require_list(data, 'agenda'))]
        return cls(
            title=title,
            summary=summary,
            stakeholders=stakeholders,
            agenda=agenda,
            date=_optional_str(data, 'date', 'analysis') or None,
        )

    @classmethod
    def from_json(cls, text: str) -> "AnalysisResult":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaMismatch(f"response is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @property
    def total_minutes(self) -> int:
        return sum(item.duration_minutes for item in self.agenda)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "date": self.date,
            "stakeholders": [s.to_dict() for s in self.stakeholders],
            "agenda": [a.to_dict() for a in self.agenda],
        }
