"""Pytest fixtures for service and API tests."""

from collections.abc import AsyncGenerator, Generator, Iterable
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from vocab_trainer.api.deps import get_kv_store, get_learner_id, get_word_source
from vocab_trainer.db.store import MemoryStore
from vocab_trainer.main import create_app
from vocab_trainer.schemas import Explanation, NewWord
from vocab_trainer.services.daily_task import TaskAssembler
from vocab_trainer.services.learner_settings import LearnerSettingsService
from vocab_trainer.services.ledger import DailyLedgerService
from vocab_trainer.services.progress import ProgressService
from vocab_trainer.utils.exceptions import UpstreamUnavailable

LEARNER_ID = "learner-test"
NOW = datetime(2024, 5, 10, 9, 30, tzinfo=timezone.utc)


class StubWordSource:
    """Word source replaying a scripted list of words (or failures)."""

    def __init__(self, words: Iterable[NewWord | Exception] = (), *, explain_error: Exception | None = None):
        self._words = list(words)
        self.explain_error = explain_error
        self.exclusions: list[set[str]] = []
        self.explained: list[str] = []
        self.questions: list[str] = []

    def select_new_word(self, exclude: Iterable[str]) -> NewWord:
        self.exclusions.append(set(exclude))
        if not self._words:
            raise UpstreamUnavailable("No scripted words left")
        word = self._words.pop(0)
        if isinstance(word, Exception):
            raise word
        return word

    def explain(self, term: str) -> Explanation:
        self.explained.append(term)
        if self.explain_error is not None:
            raise self.explain_error
        return Explanation(
            explanation=f"meaning of {term}",
            example_sentence=f"Uso {term} cada día.",
            example_translation=f"I use {term} every day.",
            tip="Practice out loud.",
        )

    def answer_question(self, question: str) -> str:
        self.questions.append(question)
        return f"answer to {question}"


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def word_source() -> StubWordSource:
    return StubWordSource(
        [
            NewWord(term="casa", translation="house"),
            NewWord(term="perro", translation="dog"),
            NewWord(term="agua", translation="water"),
            NewWord(term="libro", translation="book"),
            NewWord(term="sol", translation="sun"),
        ]
    )


@pytest.fixture()
def ledger_service(store) -> DailyLedgerService:
    return DailyLedgerService(store, learner_id=LEARNER_ID)


@pytest.fixture()
def progress_service(store, ledger_service) -> ProgressService:
    return ProgressService(store, learner_id=LEARNER_ID, ledger=ledger_service)


@pytest.fixture()
def settings_service(store) -> LearnerSettingsService:
    return LearnerSettingsService(store, learner_id=LEARNER_ID, goal_choices=(1, 2, 3, 5), default_goal=1)


@pytest.fixture()
def assembler(progress_service, ledger_service, settings_service, word_source) -> TaskAssembler:
    return TaskAssembler(
        progress=progress_service,
        ledger=ledger_service,
        learner_settings=settings_service,
        word_source=word_source,
        strict_first_word=False,
        backfill_limit=0,
    )


def _build_app(store: MemoryStore, word_source: StubWordSource):
    app = create_app()
    app.dependency_overrides[get_kv_store] = lambda: store
    app.dependency_overrides[get_word_source] = lambda: word_source
    app.dependency_overrides[get_learner_id] = lambda: LEARNER_ID
    return app


@pytest.fixture()
def client(store, word_source) -> Generator[TestClient, None, None]:
    app = _build_app(store, word_source)
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def async_client(store, word_source) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = _build_app(store, word_source)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
