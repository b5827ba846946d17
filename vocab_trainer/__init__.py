"""Spaced-repetition vocabulary trainer service."""
