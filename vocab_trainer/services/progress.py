"""Business logic for learner vocabulary progress."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from vocab_trainer.core.calendar import utc_today
from vocab_trainer.core.srs import sm2
from vocab_trainer.db.store import KeyValueStore, word_key, word_prefix
from vocab_trainer.schemas.ledger import DailyLedger, LedgerEntry
from vocab_trainer.schemas.progress import ProgressRecord
from vocab_trainer.services.ledger import DailyLedgerService
from vocab_trainer.utils.exceptions import UpstreamUnavailable, ValidationError

if TYPE_CHECKING:
    from vocab_trainer.services.word_source import WordSource


class ProgressService:
    """High level helper for vocabulary progress workflows."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        learner_id: str,
        ledger: DailyLedgerService | None = None,
    ) -> None:
        self.store = store
        self.learner_id = learner_id
        self.ledger = ledger or DailyLedgerService(store, learner_id=learner_id)

    # ------------------------------------------------------------------
    # Store helpers
    # ------------------------------------------------------------------
    def get_record(self, item_key: str) -> ProgressRecord | None:
        raw = self.store.get(word_key(self.learner_id, item_key))
        return ProgressRecord.model_validate(raw) if raw is not None else None

    def save_record(self, record: ProgressRecord) -> ProgressRecord:
        self.store.set(
            word_key(self.learner_id, record.item_key),
            record.model_dump(mode="json", by_alias=True),
        )
        return record

    def list_records(self) -> list[ProgressRecord]:
        """Return every progress record of the learner, ordered by item key."""

        keys = self.store.keys(word_prefix(self.learner_id))
        records = [
            ProgressRecord.model_validate(raw)
            for raw in self.store.mget(keys)
            if raw is not None
        ]
        return sorted(records, key=lambda record: record.item_key)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------
    def submit_review(
        self,
        *,
        item_key: str,
        quality: int,
        translation: str | None = None,
        example_sentence: str | None = None,
        now: datetime | None = None,
    ) -> ProgressRecord:
        """Grade a review, persist the updated record and return it.

        Unknown items are created from ``translation``; supplying an example
        sentence fills it in on records that do not have one yet.
        """

        today = utc_today(now)
        translation = translation.strip() if translation else None
        example_sentence = example_sentence.strip() if example_sentence else None
        prior = self.get_record(item_key)
        is_new = prior is None
        if is_new and not translation:
            raise ValidationError(
                "Translation is required for a new item.", {"item_key": item_key}
            )

        state = sm2.review(prior.scheduling_state() if prior else None, quality, today)
        record = ProgressRecord(
            item_key=item_key,
            translation=prior.translation if prior else translation,
            example_sentence=prior.example_sentence if prior else None,
            repetitions=state.repetitions,
            interval_days=state.interval_days,
            ease_factor=state.ease_factor,
            next_review_date=state.next_review_date,
        )
        if example_sentence and not record.example_sentence:
            record.example_sentence = example_sentence

        self.save_record(record)
        if is_new:
            self.ledger.record_introduced(
                LedgerEntry(
                    item_key=record.item_key,
                    translation=record.translation,
                    example_sentence=record.example_sentence,
                ),
                now,
            )
        logger.info(
            "Review recorded",
            learner_id=self.learner_id,
            item_key=item_key,
            quality=quality,
            is_new=is_new,
            interval_days=record.interval_days,
            next_review=record.next_review_date.isoformat(),
        )
        return record

    # ------------------------------------------------------------------
    # Compatibility
    # ------------------------------------------------------------------
    def backfill_example_sentences(
        self,
        records: list[ProgressRecord],
        *,
        ledger: DailyLedger | None = None,
        word_source: WordSource | None = None,
        limit: int = 0,
    ) -> int:
        """Fill in example sentences missing from records written by older clients.

        This is a one-time migration run from the daily task read path. The
        ledger entry for the item is used first, then up to ``limit`` word
        source lookups. Records are updated in place and persisted; the number
        of records fixed is returned.
        """

        fixed = 0
        lookups = 0
        for record in records:
            if record.example_sentence:
                continue

            sentence = None
            entry = ledger.find(record.item_key) if ledger else None
            if entry and entry.example_sentence:
                sentence = entry.example_sentence
            elif word_source is not None and lookups < limit:
                lookups += 1
                try:
                    sentence = word_source.explain(record.item_key).example_sentence
                except UpstreamUnavailable as exc:
                    logger.warning(
                        "Example backfill lookup failed",
                        item_key=record.item_key,
                        error=exc.message,
                    )

            if sentence:
                record.example_sentence = sentence
                self.save_record(record)
                fixed += 1

        if fixed:
            logger.info("Backfilled example sentences", learner_id=self.learner_id, count=fixed)
        return fixed
