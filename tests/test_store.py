"""Tests for the key-value store backends and progress persistence."""
from __future__ import annotations

from datetime import date

import pytest
import redis

from vocab_trainer.db.store import MemoryStore, RedisStore, build_store, word_key, word_prefix
from vocab_trainer.schemas import ProgressRecord
from vocab_trainer.utils.exceptions import UpstreamUnavailable

from tests.conftest import LEARNER_ID


class FakeRedis:
    def __init__(self, *, fail: bool = False):
        self.data: dict[str, str] = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("connection refused")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value

    def mget(self, keys):
        self._check()
        return [self.data.get(key) for key in keys]

    def scan_iter(self, match):
        self._check()
        prefix = match.rstrip("*")
        return iter([key for key in self.data if key.startswith(prefix)])


def test_memory_store_returns_copies(store: MemoryStore):
    value = {"itemKey": "casa", "tags": ["a"]}
    store.set("k", value)
    value["tags"].append("b")

    loaded = store.get("k")
    loaded["tags"].append("c")

    assert store.get("k") == {"itemKey": "casa", "tags": ["a"]}


def test_memory_store_lists_keys_by_prefix(store: MemoryStore):
    store.set(word_key("ana", "casa"), {"x": 1})
    store.set(word_key("ana", "agua"), {"x": 2})
    store.set(word_key("ben", "perro"), {"x": 3})
    store.set("user:ana:settings", {"dailyGoal": 2})

    keys = store.keys(word_prefix("ana"))

    assert keys == [word_key("ana", "agua"), word_key("ana", "casa")]
    assert store.mget(keys) == [{"x": 2}, {"x": 1}]
    assert store.get("missing") is None


def test_redis_store_round_trips_json():
    fake = FakeRedis()
    store = RedisStore("redis://unused", client=fake)

    store.set(word_key(LEARNER_ID, "casa"), {"itemKey": "casa", "nextReviewDate": date(2024, 5, 11)})

    assert store.get(word_key(LEARNER_ID, "casa")) == {"itemKey": "casa", "nextReviewDate": "2024-05-11"}
    assert store.keys(word_prefix(LEARNER_ID)) == [word_key(LEARNER_ID, "casa")]
    assert store.mget([]) == []


def test_redis_store_errors_surface_as_upstream_unavailable():
    store = RedisStore("redis://unused", client=FakeRedis(fail=True))

    with pytest.raises(UpstreamUnavailable):
        store.get("anything")
    with pytest.raises(UpstreamUnavailable):
        store.set("anything", {})
    with pytest.raises(UpstreamUnavailable):
        store.keys("user:")


def test_build_store_without_url_uses_memory():
    assert isinstance(build_store(None), MemoryStore)


def test_progress_record_round_trip(progress_service):
    record = ProgressRecord(
        item_key="mañana",
        translation="tomorrow",
        example_sentence="Hasta mañana.",
        repetitions=3,
        interval_days=15,
        ease_factor=2.6,
        next_review_date=date(2024, 5, 25),
    )

    progress_service.save_record(record)

    assert progress_service.get_record("mañana") == record


def test_progress_record_stored_with_camel_case_keys(store, progress_service):
    record = ProgressRecord(item_key="sol", translation="sun", next_review_date=date(2024, 5, 11))

    progress_service.save_record(record)

    raw = store.get(word_key(LEARNER_ID, "sol"))
    assert raw["itemKey"] == "sol"
    assert raw["intervalDays"] == 1
    assert raw["easeFactor"] == 2.5
    assert raw["nextReviewDate"] == "2024-05-11"
