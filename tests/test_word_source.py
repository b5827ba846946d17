"""Tests for the LLM-backed word source and the tutor endpoint."""
from __future__ import annotations

import pytest

from vocab_trainer.services.llm_service import LLMProviderError, LLMResult
from vocab_trainer.services.word_source import WordSource, parse_json_reply
from vocab_trainer.utils.exceptions import UpstreamUnavailable


class ScriptedLLMService:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def generate_chat_completion(self, messages, **kwargs):
        self.calls.append((list(messages), kwargs))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResult(
            provider="stub",
            model="stub-model",
            content=reply,
            prompt_tokens=1,
            completion_tokens=1,
            total_tokens=2,
            raw_response={},
        )


def _source(replies, attempts=2) -> tuple[WordSource, ScriptedLLMService]:
    llm = ScriptedLLMService(replies)
    return WordSource(llm, language="Spanish", explanation_language="English", attempts=attempts), llm


def test_parse_json_reply_strips_markdown_fences():
    assert parse_json_reply('```json\n{"term": "casa"}\n```') == {"term": "casa"}
    assert parse_json_reply('{"term": "sol"}') == {"term": "sol"}


def test_parse_json_reply_rejects_non_objects():
    with pytest.raises(ValueError):
        parse_json_reply('["casa"]')


def test_select_new_word_sends_exclusions():
    source, llm = _source(['{"term": " perro ", "translation": "dog"}'])

    word = source.select_new_word({"casa", "agua"})

    assert (word.term, word.translation) == ("perro", "dog")
    messages, kwargs = llm.calls[0]
    assert messages[0]["content"] == 'Learned words: ["agua", "casa"]'
    assert kwargs["json_mode"] is True
    assert "Spanish" in kwargs["system_prompt"]


def test_select_new_word_retries_when_an_excluded_word_comes_back():
    source, llm = _source(
        [
            '{"term": "Casa", "translation": "house"}',
            '{"term": "libro", "translation": "book"}',
        ]
    )

    word = source.select_new_word(["casa"])

    assert word.term == "libro"
    assert len(llm.calls) == 2


def test_select_new_word_gives_up_after_repeated_duplicates():
    source, _ = _source(['{"term": "casa", "translation": "house"}'] * 2)

    with pytest.raises(UpstreamUnavailable):
        source.select_new_word(["casa"])


@pytest.mark.parametrize("reply", ["not json", '{"term": "casa"}'])
def test_select_new_word_unparseable_reply(reply):
    source, _ = _source([reply])

    with pytest.raises(UpstreamUnavailable):
        source.select_new_word([])


def test_provider_failure_is_upstream_unavailable():
    source, _ = _source([LLMProviderError("gemini: boom")])

    with pytest.raises(UpstreamUnavailable):
        source.explain("casa")


def test_missing_provider_configuration_is_upstream_unavailable():
    source = WordSource(None, language="Spanish", explanation_language="English", attempts=1)

    with pytest.raises(UpstreamUnavailable):
        source.select_new_word([])


def test_explain_returns_structured_explanation():
    source, llm = _source(
        [
            '{"explanation": "a building to live in", "exampleSentence": "Mi casa es grande.", '
            '"exampleTranslation": "My house is big.", "tip": "La casa is feminine."}'
        ]
    )

    explanation = source.explain("casa")

    assert explanation.example_sentence == "Mi casa es grande."
    assert explanation.example_translation == "My house is big."
    assert llm.calls[0][0][0]["content"] == 'The word is: "casa"'


def test_answer_question_uses_plain_text_mode():
    source, llm = _source(["Ser is for permanent traits."])

    answer = source.answer_question("  ser vs estar?  ")

    assert answer == "Ser is for permanent traits."
    messages, kwargs = llm.calls[0]
    assert messages[0]["content"] == "ser vs estar?"
    assert kwargs["json_mode"] is False


def test_ask_tutor_endpoint(client, word_source):
    response = client.post("/api/v1/askTutor", json={"question": "¿Qué es casa?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "answer to ¿Qué es casa?"}
    assert word_source.questions == ["¿Qué es casa?"]


@pytest.mark.parametrize("body", [{"question": ""}, {"question": "   "}, {}])
def test_ask_tutor_requires_question(client, body):
    response = client.post("/api/v1/askTutor", json=body)

    assert response.status_code == 400


def test_ask_tutor_hides_upstream_errors(client, word_source):
    def fail(question):
        raise UpstreamUnavailable("provider exploded", {"secret": "x"})

    word_source.answer_question = fail

    response = client.post("/api/v1/askTutor", json={"question": "hola"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to get an answer from the AI tutor."}
