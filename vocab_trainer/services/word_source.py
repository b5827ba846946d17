"""LLM-backed supply of new vocabulary and tutor explanations."""
from __future__ import annotations

import json
import re
from typing import Any, Iterable

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from vocab_trainer.config import settings
from vocab_trainer.services.llm_service import LLMProviderError, LLMService
from vocab_trainer.schemas.word import Explanation, NewWord
from vocab_trainer.utils.exceptions import UpstreamUnavailable

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

WORD_SELECTION_PROMPT = (
    "You are an AI language curriculum designer. Select a single, very common, "
    "beginner-level {language} word for a student to learn. The student has already "
    "learned the words listed in the user message; you MUST pick a word that is NOT "
    'on that list. Reply with JSON only, using exactly two keys: "term" (the '
    '{language} word) and "translation" (its English meaning).'
)

EXPLANATION_PROMPT = (
    "You are a friendly, patient and encouraging {language} tutor for a beginner. "
    "Explain the given word concisely in {explanation_language}. Reply with JSON only, "
    "using exactly these keys: "
    '"explanation" (a simple definition), '
    '"exampleSentence" (a common, practical {language} sentence using the word), '
    '"exampleTranslation" (the English translation of that sentence), '
    '"tip" (one useful extra: a related word, a common mistake or a cultural note).'
)

TUTOR_PROMPT = (
    "You are a friendly, patient and knowledgeable {language} tutor. Your student is "
    "a beginner. Answer their question in clear, easy-to-understand "
    "{explanation_language}. Keep answers concise but thorough. For a single word, "
    "explain its meaning and give an example sentence; for grammar, state the rule "
    "simply with clear examples. Stay encouraging."
)


def parse_json_reply(content: str) -> dict[str, Any]:
    """Decode a JSON object from an LLM reply, tolerating markdown fences."""

    text = _FENCE_RE.sub("", content.strip())
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    return payload


class WordSource:
    """Select new words and explain them through an :class:`LLMService`.

    Every failure, including a missing provider configuration, surfaces as
    :class:`UpstreamUnavailable`.
    """

    def __init__(
        self,
        llm_service: LLMService | None,
        *,
        language: str | None = None,
        explanation_language: str | None = None,
        attempts: int | None = None,
    ) -> None:
        self.llm_service = llm_service
        self.language = language or settings.TARGET_LANGUAGE
        self.explanation_language = explanation_language or settings.EXPLANATION_LANGUAGE
        self.attempts = attempts or settings.WORD_SELECTION_ATTEMPTS

    def _complete(self, system_prompt: str, user_message: str, *, json_mode: bool) -> str:
        if self.llm_service is None:
            raise UpstreamUnavailable("No LLM provider is configured")
        try:
            result = self.llm_service.generate_chat_completion(
                [{"role": "user", "content": user_message}],
                system_prompt=system_prompt,
                json_mode=json_mode,
                temperature=0.9 if json_mode else 0.7,
            )
        except LLMProviderError as exc:
            raise UpstreamUnavailable("LLM providers failed", {"error": str(exc)}) from exc
        return result.content

    def select_new_word(self, exclude: Iterable[str]) -> NewWord:
        """Return a word that is not in ``exclude``."""

        excluded = sorted(set(exclude))
        lowered = {term.casefold() for term in excluded}
        system_prompt = WORD_SELECTION_PROMPT.format(language=self.language)
        user_message = f"Learned words: {json.dumps(excluded, ensure_ascii=False)}"

        for attempt in range(1, self.attempts + 1):
            content = self._complete(system_prompt, user_message, json_mode=True)
            try:
                word = NewWord.model_validate(parse_json_reply(content))
            except (ValueError, PydanticValidationError) as exc:
                raise UpstreamUnavailable("Unparseable word selection reply") from exc

            word = NewWord(term=word.term.strip(), translation=word.translation.strip())
            if word.term.casefold() not in lowered:
                return word
            logger.warning("Word source repeated an excluded term", term=word.term, attempt=attempt)

        raise UpstreamUnavailable("Word source kept returning known words")

    def explain(self, term: str) -> Explanation:
        system_prompt = EXPLANATION_PROMPT.format(
            language=self.language, explanation_language=self.explanation_language
        )
        content = self._complete(system_prompt, f'The word is: "{term}"', json_mode=True)
        try:
            return Explanation.model_validate(parse_json_reply(content))
        except (ValueError, PydanticValidationError) as exc:
            raise UpstreamUnavailable("Unparseable explanation reply", {"term": term}) from exc

    def answer_question(self, question: str) -> str:
        """Answer a free-form question about the target language."""

        system_prompt = TUTOR_PROMPT.format(
            language=self.language, explanation_language=self.explanation_language
        )
        return self._complete(system_prompt, question.strip(), json_mode=False)


def build_word_source() -> WordSource:
    """Create a word source from the configured LLM providers."""

    try:
        llm_service = LLMService()
    except ValueError:
        logger.warning("No LLM provider configured, new words are unavailable")
        llm_service = None
    return WordSource(llm_service)
