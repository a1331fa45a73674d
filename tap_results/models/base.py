"""Base model configuration for parse results."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model for values that are built once and never mutated."""

    model_config = ConfigDict(frozen=True, extra="forbid")
