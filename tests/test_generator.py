"""AgendaGenerator のテスト。genai.GenerativeModel はモックに置き換える。"""

import base64
from types import SimpleNamespace
from unittest import mock

import pytest

from agendaai.agenda import generator as generator_module
from agendaai.agenda.generator import AGENDA_PROMPT, AGENDA_SCHEMA, AgendaGenerator
from agendaai.agenda.models import AnalysisResult
from agendaai.errors import GenerationError, IngestionError
from conftest import make_response

DOCUMENT = base64.b64encode(b"Quarterly planning notes").decode("ascii")


@pytest.fixture
def model_cls():
    with mock.patch.object(generator_module.genai, "GenerativeModel") as patched:
        yield patched


@pytest.fixture
def generation_config_cls():
    with mock.patch.object(generator_module.genai, "GenerationConfig") as patched:
        yield patched


@pytest.fixture
def agenda_generator():
    return AgendaGenerator(api_key="test-key", model_name="gemini-test", temperature=0.3)


def test_generate_success(agenda_generator, model_cls, generation_config_cls, sample_analysis_json):
    model_cls.return_value.generate_content.return_value = make_response(sample_analysis_json)

    result = agenda_generator.generate(DOCUMENT, "text/plain")

    assert isinstance(result, AnalysisResult)
    assert result.title == "Q3 Launch Planning"
    assert len(result.agenda) == 3


def test_request_contains_inline_document_and_instruction(
    agenda_generator, model_cls, generation_config_cls, sample_analysis_json
):
    model_cls.return_value.generate_content.return_value = make_response(sample_analysis_json)

    agenda_generator.generate(DOCUMENT, "application/pdf")

    contents = model_cls.return_value.generate_content.call_args.args[0]
    assert contents[0] == {"mime_type": "application/pdf", "data": b"Quarterly planning notes"}
    assert contents[1] == AGENDA_PROMPT


def test_request_declares_json_schema_and_low_temperature(
    agenda_generator, model_cls, generation_config_cls, sample_analysis_json
):
    model_cls.return_value.generate_content.return_value = make_response(sample_analysis_json)

    agenda_generator.generate(DOCUMENT, "text/plain")

    generation_config_cls.assert_called_once_with(
        response_mime_type="application/json",
        response_schema=AGENDA_SCHEMA,
        temperature=0.3,
    )
    assert model_cls.call_args.args[0] == "gemini-test"
    assert model_cls.call_args.kwargs["generation_config"] is generation_config_cls.return_value


def test_schema_requires_core_fields():
    assert set(AGENDA_SCHEMA["required"]) == {"title", "summary", "stakeholders", "agenda"}
    assert "date" not in AGENDA_SCHEMA["required"]
    assert "speaker" not in AGENDA_SCHEMA["properties"]["agenda"]["items"]["required"]


def test_empty_payload_is_rejected(agenda_generator, model_cls):
    with pytest.raises(IngestionError):
        agenda_generator.generate("", "text/plain")
    model_cls.assert_not_called()


def test_transport_error_becomes_generation_error(agenda_generator, model_cls, generation_config_cls):
    model_cls.return_value.generate_content.side_effect = RuntimeError("quota exceeded")

    with pytest.raises(GenerationError) as excinfo:
        agenda_generator.generate(DOCUMENT, "text/plain")
    assert "quota exceeded" in excinfo.value.details["error"]


def test_constructor_api_key_is_applied(agenda_generator, model_cls, generation_config_cls, sample_analysis_json):
    model_cls.return_value.generate_content.return_value = make_response(sample_analysis_json)

    with mock.patch.object(generator_module.genai, "configure") as configure:
        agenda_generator.generate(DOCUMENT, "text/plain")

    configure.assert_called_once_with(api_key="test-key")


def test_missing_api_key_becomes_generation_error(model_cls, generation_config_cls):
    with pytest.raises(GenerationError):
        AgendaGenerator(api_key=None).generate(DOCUMENT, "text/plain")
    model_cls.assert_not_called()


def test_no_candidates(agenda_generator, model_cls, generation_config_cls):
    model_cls.return_value.generate_content.return_value = make_response(candidates=False)

    with pytest.raises(GenerationError, match="No response"):
        agenda_generator.generate(DOCUMENT, "text/plain")


def test_empty_text(agenda_generator, model_cls, generation_config_cls):
    model_cls.return_value.generate_content.return_value = make_response(text="")

    with pytest.raises(GenerationError, match="No response"):
        agenda_generator.generate(DOCUMENT, "text/plain")


def test_blocked_by_safety(agenda_generator, model_cls, generation_config_cls):
    rating = SimpleNamespace(
        category=SimpleNamespace(name="HARM_CATEGORY_HARASSMENT"),
        probability=SimpleNamespace(name="HIGH"),
    )
    model_cls.return_value.generate_content.return_value = make_response(
        finish_reason="SAFETY", safety_ratings=[rating]
    )

    with pytest.raises(GenerationError, match="safety") as excinfo:
        agenda_generator.generate(DOCUMENT, "text/plain")
    assert excinfo.value.details["safety_ratings"] == ["HARM_CATEGORY_HARASSMENT: HIGH"]


def test_malformed_json(agenda_generator, model_cls, generation_config_cls):
    model_cls.return_value.generate_content.return_value = make_response('{"title": "Half')

    with pytest.raises(GenerationError, match="malformed"):
        agenda_generator.generate(DOCUMENT, "text/plain")


def test_valid_json_missing_stakeholders(agenda_generator, model_cls, generation_config_cls):
    model_cls.return_value.generate_content.return_value = make_response(
        '{"title": "T", "summary": "S", "agenda": []}'
    )

    with pytest.raises(GenerationError) as excinfo:
        agenda_generator.generate(DOCUMENT, "text/plain")
    assert "stakeholders" in excinfo.value.details["error"]
