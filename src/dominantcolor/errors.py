"""Error kinds raised by the dominant color engine."""

from __future__ import annotations


class DominantColorError(Exception):
    """Base class for all dominant color errors."""


class EmptyInputError(DominantColorError):
    """The buffer has no pixels eligible for extraction."""


class InvalidConfigError(DominantColorError):
    """An extraction option is out of its accepted range."""


class DecodeError(DominantColorError):
    """The image source could not be read or decoded."""
