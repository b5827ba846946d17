"""Per-day record of newly introduced vocabulary."""
from __future__ import annotations

from datetime import datetime

from loguru import logger

from vocab_trainer.core.calendar import utc_today
from vocab_trainer.db.store import KeyValueStore, ledger_key
from vocab_trainer.schemas.ledger import DailyLedger, LedgerEntry


class DailyLedgerService:
    """Track which new items were introduced today.

    Only today's ledger is ever read or written. A stored ledger for any other
    date is stale and is treated as empty; it gets replaced on the next write.
    """

    def __init__(self, store: KeyValueStore, *, learner_id: str) -> None:
        self.store = store
        self.learner_id = learner_id

    def get_today(self, now: datetime | None = None) -> DailyLedger:
        """Return today's ledger, or an empty one when none is stored for today."""

        today = utc_today(now)
        raw = self.store.get(ledger_key(self.learner_id))
        if raw is not None:
            ledger = DailyLedger.model_validate(raw)
            if ledger.date == today:
                return ledger
        return DailyLedger(date=today)

    def record_introduced(self, entry: LedgerEntry, now: datetime | None = None) -> DailyLedger:
        """Append ``entry`` to today's ledger unless its key is already present."""

        ledger = self.get_today(now)
        if ledger.contains(entry.item_key):
            logger.debug("Item already introduced today", item_key=entry.item_key)
            return ledger

        ledger.introduced_items.append(entry)
        self.store.set(ledger_key(self.learner_id), ledger.model_dump(mode="json", by_alias=True))
        logger.info(
            "New item introduced",
            learner_id=self.learner_id,
            item_key=entry.item_key,
            introduced_today=len(ledger.introduced_items),
        )
        return ledger
