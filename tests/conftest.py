"""
Pytest configuration and fixtures.
Gemini への呼び出しは全てフェイクまたはモックに置き換える。
"""

import base64
import json
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from agendaai import create_app
from agendaai.agenda.models import AnalysisResult
from agendaai.ingestion import UploadedFile, from_bytes
from agendaai.workspace import AgendaWorkspace

AUTH_KEY = "test-auth-key"


class FakeGenerator:
    """AgendaGenerator の代わり。結果または例外をキューから返す。"""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.before_return = None # 生成中に割り込む処理 (クリアなど)

    def generate(self, data, mime_type):
        self.calls.append((data, mime_type))
        if self.before_return:
            self.before_return()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeChatSession:
    """AgendaChatSession の代わり。送信内容を記録し、返答または例外を返す。"""

    def __init__(self, data, mime_type, analysis, replies=None):
        self.data = data
        self.mime_type = mime_type
        self.analysis = analysis
        self.replies = list(replies or [])
        self.calls = []
        self.during_send = None

    def send_message(self, text, is_first_turn=False):
        self.calls.append((text, is_first_turn))
        if self.during_send:
            self.during_send()
        reply = self.replies.pop(0) if self.replies else "Default reply"
        if isinstance(reply, Exception):
            raise reply
        return reply


class ChatFactory:
    def __init__(self):
        self.sessions: List[FakeChatSession] = []
        self.next_replies: List[Any] = []

    def __call__(self, data, mime_type, analysis):
        session = FakeChatSession(data, mime_type, analysis, replies=self.next_replies)
        self.next_replies = []
        self.sessions.append(session)
        return session


def make_response(text=None, finish_reason="STOP", safety_ratings=None, candidates=True):
    """google-generativeai の GenerateContentResponse を模したオブジェクト。"""
    if not candidates:
        return SimpleNamespace(candidates=[])
    parts = [SimpleNamespace(text=text)] if text is not None else []
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=parts),
        finish_reason=SimpleNamespace(name=finish_reason),
        safety_ratings=safety_ratings or [],
    )
    return SimpleNamespace(candidates=[candidate])


@pytest.fixture
def sample_analysis_data() -> Dict[str, Any]:
    return {
        "title": "Q3 Launch Planning",
        "summary": "Align the team on the Q3 launch scope and owners.",
        "date": "Next Monday",
        "stakeholders": [
            {"name": "Alice Chen", "role": "Product Manager", "relevance": "Owns the launch scope"},
            {"name": "Bob Stone", "role": "Engineering Lead", "relevance": "Estimates delivery"},
        ],
        "agenda": [
            {"id": "1", "topic": "Goals", "durationMinutes": 30, "description": "Review launch goals", "speaker": "Alice Chen"},
            {"id": "2", "topic": "Risks", "durationMinutes": 15, "description": "Known risks"},
            {"id": "3", "topic": "Plan", "durationMinutes": 60, "description": "Work breakdown", "speaker": "Bob Stone"},
        ],
    }


@pytest.fixture
def sample_analysis_json(sample_analysis_data) -> str:
    return json.dumps(sample_analysis_data)


@pytest.fixture
def sample_analysis(sample_analysis_data) -> AnalysisResult:
    return AnalysisResult.from_dict(sample_analysis_data)


@pytest.fixture
def sample_file() -> UploadedFile:
    return from_bytes("brief.txt", b"Project brief: launch the new product in Q3.", "text/plain")


@pytest.fixture
def other_file() -> UploadedFile:
    return from_bytes("roadmap.md", b"# Roadmap\nHire two engineers.", "text/markdown")


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def chat_factory() -> ChatFactory:
    return ChatFactory()


@pytest.fixture
def workspace(fake_generator, chat_factory) -> AgendaWorkspace:
    return AgendaWorkspace(fake_generator, chat_factory)


@pytest.fixture
def app(workspace):
    flask_app = create_app(
        config={
            "TESTING": True,
            "SECRET_AUTH_KEY": AUTH_KEY,
            "GOOGLE_GEN_AI_API_KEY": None,
        },
        workspace=workspace,
    )
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"X-Auth-Key": AUTH_KEY}


@pytest.fixture
def upload_payload() -> Dict[str, Any]:
    raw = b"Project brief: launch the new product in Q3."
    return {
        "name": "brief.txt",
        "mime_type": "text/plain",
        "data": base64.b64encode(raw).decode("ascii"),
    }

