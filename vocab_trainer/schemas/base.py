"""Shared pydantic configuration."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model exposed with camelCase keys on the wire and in the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
