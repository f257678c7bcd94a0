"""Shared pydantic base for models that travel over the wire."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case fields in Python, camelCase keys in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
