# agendaai/agenda/generator.py

import logging
from typing import Optional

import google.generativeai as genai

from agendaai import gemini
from agendaai.agenda.models import AnalysisResult, SchemaMismatch
from agendaai.errors import GenerationError, IngestionError

logger = logging.getLogger(__name__)

DEFAULT_AGENDA_MODEL = 'gemini-2.0-flash'
DEFAULT_TEMPERATURE = 0.3

AGENDA_PROMPT = """
Analyze this document and generate a structured meeting agenda.
Identify key stakeholders who should attend, the topics to cover, and estimate the time to spend on each topic.
Create a logical flow for the meeting.
""".strip()

# レスポンスの構造 (Gemini の response_schema 形式)
AGENDA_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "Proposed title for the meeting"},
        "summary": {"type": "STRING", "description": "Brief summary of the meeting goals"},
        "date": {"type": "STRING", "description": "Suggested date or relative time (e.g. 'Next Monday')"},
        "stakeholders": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "role": {"type": "STRING"},
                    "relevance": {"type": "STRING", "description": "Why they should be there"},
                },
                "required": ["name", "role", "relevance"],
            },
        },
        "agenda": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "topic": {"type": "STRING"},
                    "durationMinutes": {"type": "INTEGER", "description": "Estimated time in minutes"},
                    "description": {"type": "STRING", "description": "Details about this agenda item"},
                    "speaker": {"type": "STRING", "description": "Suggested speaker for this item"},
                },
                "required": ["id", "topic", "durationMinutes", "description"],
            },
        },
    },
    "required": ["title", "summary", "stakeholders", "agenda"],
}


class AgendaGenerator:
    """
    ドキュメントをGeminiに送り、構造化されたアジェンダ (AnalysisResult) を生成するクライアント。
    呼び出し間で状態は保持しない。
    """

    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_AGENDA_MODEL,
                 temperature: float = DEFAULT_TEMPERATURE):
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature

    def _build_model(self):
        return genai.GenerativeModel(
            self.model_name,
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
                response_schema=AGENDA_SCHEMA,
                temperature=self.temperature,
            ),
        )

    def generate(self, data: str, mime_type: str) -> AnalysisResult:
        """
        Base64のドキュメントからアジェンダを生成する。
        失敗時は GenerationError を送出し、部分的な結果は返さない。
        """
        if not data:
            raise IngestionError("The document payload is empty.")
        try:
            gemini.ensure_configured(self.api_key)
            model = self._build_model()
            response = model.generate_content([gemini.inline_document(data, mime_type), AGENDA_PROMPT])
        except Exception as e:
            logger.error(f"Error generating agenda with {self.model_name}: {e}", exc_info=True)
            raise GenerationError("The agenda could not be generated.", details={"error": str(e)}) from e

        if gemini.blocked_by_safety(response):
            logger.warning("Agenda generation was blocked due to safety settings.")
            raise GenerationError(
                "The agenda could not be generated. AI response blocked due to safety settings.",
                details={"safety_ratings": gemini.safety_details(response)},
            )

        text = gemini.response_text(response)
        if not text:
            logger.warning("Agenda generation returned no content.")
            raise GenerationError("No response generated.")

        try:
            result = AnalysisResult.from_json(text)
        except SchemaMismatch as e:
            logger.error(f"Agenda response did not match the expected shape: {e}")
            logger.debug(f"AI raw text response: {text}")
            raise GenerationError("The generated agenda was malformed.", details={"error": str(e)}) from e

        logger.info(
            f"Generated agenda '{result.title}' with {len(result.agenda)} items "
            f"and {len(result.stakeholders)} stakeholders."
        )
        return result
