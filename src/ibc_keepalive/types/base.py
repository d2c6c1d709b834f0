"""Reusable, strict base models for configuration data."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    An immutable pydantic base model that rejects unknown fields.

    Config files are hand-written, so a typo in a key must fail loudly
    instead of silently falling back to a default.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        validate_default=True,
    )
