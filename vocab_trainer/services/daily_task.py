"""Assemble the daily queue of new and due vocabulary."""
from __future__ import annotations

from datetime import datetime

from loguru import logger

from vocab_trainer.config import settings
from vocab_trainer.core.calendar import utc_now, utc_today
from vocab_trainer.db.store import KeyValueStore
from vocab_trainer.schemas.ledger import LedgerEntry
from vocab_trainer.schemas.task import DailyTask, TaskItem
from vocab_trainer.services.learner_settings import LearnerSettingsService
from vocab_trainer.services.ledger import DailyLedgerService
from vocab_trainer.services.progress import ProgressService
from vocab_trainer.services.word_source import WordSource
from vocab_trainer.utils.exceptions import UpstreamUnavailable


class TaskAssembler:
    """Build today's task: owed new words first, then every due review."""

    def __init__(
        self,
        *,
        progress: ProgressService,
        ledger: DailyLedgerService,
        learner_settings: LearnerSettingsService,
        word_source: WordSource,
        strict_first_word: bool | None = None,
        backfill_limit: int | None = None,
    ) -> None:
        self.progress = progress
        self.ledger = ledger
        self.learner_settings = learner_settings
        self.word_source = word_source
        self.strict_first_word = (
            settings.STRICT_FIRST_NEW_WORD if strict_first_word is None else strict_first_word
        )
        self.backfill_limit = (
            settings.EXAMPLE_BACKFILL_LIMIT if backfill_limit is None else backfill_limit
        )

    @classmethod
    def for_learner(
        cls, store: KeyValueStore, *, learner_id: str, word_source: WordSource
    ) -> "TaskAssembler":
        """Wire the store-backed services of one learner together."""

        ledger = DailyLedgerService(store, learner_id=learner_id)
        return cls(
            progress=ProgressService(store, learner_id=learner_id, ledger=ledger),
            ledger=ledger,
            learner_settings=LearnerSettingsService(store, learner_id=learner_id),
            word_source=word_source,
        )

    def get_daily_task(self, now: datetime | None = None) -> DailyTask:
        now = now or utc_now()
        today = utc_today(now)

        records = self.progress.list_records()
        ledger = self.ledger.get_today(now)
        self.progress.backfill_example_sentences(
            records, ledger=ledger, word_source=self.word_source, limit=self.backfill_limit
        )

        due = sorted(
            (record for record in records if record.is_due(today)),
            key=lambda record: (record.next_review_date, record.item_key),
        )
        review_queue = [
            TaskItem(
                kind="review",
                item_key=record.item_key,
                translation=record.translation,
                example_sentence=record.example_sentence,
            )
            for record in due
        ]

        learner_settings = self.learner_settings.get()
        quota_remaining = max(0, learner_settings.daily_goal - len(ledger.introduced_items))

        new_item_tasks: list[TaskItem] = []
        if quota_remaining > 0:
            exclude = {record.item_key for record in records} | set(ledger.item_keys)
            for _ in range(quota_remaining):
                try:
                    word = self.word_source.select_new_word(exclude)
                    explanation = self.word_source.explain(word.term)
                except UpstreamUnavailable as exc:
                    if self.strict_first_word and not new_item_tasks and not ledger.introduced_items:
                        raise
                    logger.warning(
                        "New word source unavailable, serving reviews only",
                        error=exc.message,
                        introduced=len(new_item_tasks),
                        owed=quota_remaining,
                    )
                    break

                exclude.add(word.term)
                new_item_tasks.append(
                    TaskItem(
                        kind="new",
                        item_key=word.term,
                        translation=word.translation,
                        example_sentence=explanation.example_sentence or None,
                        explanation=explanation,
                    )
                )
                ledger = self.ledger.record_introduced(
                    LedgerEntry(
                        item_key=word.term,
                        translation=word.translation,
                        example_sentence=explanation.example_sentence or None,
                    ),
                    now,
                )

        logger.info(
            "Daily task assembled",
            learner_id=self.progress.learner_id,
            new=len(new_item_tasks),
            reviews=len(review_queue),
            known=len(records),
            daily_goal=learner_settings.daily_goal,
        )
        return DailyTask(
            review_queue=review_queue,
            new_item_tasks=new_item_tasks,
            queue=[*new_item_tasks, *review_queue],
            all_learned_words=records,
            settings=learner_settings,
            words_learned_today=ledger.introduced_items,
        )
