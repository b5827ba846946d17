"""Pydantic models for the daily new-word ledger."""
from __future__ import annotations

import datetime as dt

from pydantic import Field

from vocab_trainer.schemas.base import CamelModel


class LedgerEntry(CamelModel):
    """A vocabulary item introduced on a given day."""

    item_key: str
    translation: str
    example_sentence: str | None = None


class DailyLedger(CamelModel):
    """New items introduced on ``date``, in introduction order."""

    date: dt.date
    introduced_items: list[LedgerEntry] = Field(default_factory=list)

    def contains(self, item_key: str) -> bool:
        return any(entry.item_key == item_key for entry in self.introduced_items)

    def find(self, item_key: str) -> LedgerEntry | None:
        for entry in self.introduced_items:
            if entry.item_key == item_key:
                return entry
        return None

    @property
    def item_keys(self) -> list[str]:
        return [entry.item_key for entry in self.introduced_items]
