"""Shared base types."""

from .base import StrictBaseModel

__all__ = ["StrictBaseModel"]
