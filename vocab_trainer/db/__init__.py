"""Persistence backends."""

from vocab_trainer.db.store import KeyValueStore, MemoryStore, RedisStore, build_store, get_store

__all__ = ["KeyValueStore", "MemoryStore", "RedisStore", "build_store", "get_store"]
