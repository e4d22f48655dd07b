"""Base classes and exceptions for the fretscale package.

This module provides the small set of abstract base classes and the
exception hierarchy shared by the rest of the package.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any


class Closeable(metaclass=ABCMeta):
    """Abstract base class for objects that need explicit resource cleanup."""

    @abstractmethod
    def close(self) -> None:
        """Close this to free resources and deny further use."""
        raise NotImplementedError()


class MatchException(Exception):
    """Exception raised when pattern matching fails."""

    def __init__(self, value: Any) -> None:
        """Initialize a MatchException with the unmatched value.

        Args:
            value: The value that failed to match any pattern.
        """
        super().__init__(f"Failed to match value: {value}")


class FretscaleError(Exception):
    """Base class for errors raised by fretscale."""


class UnknownNote(FretscaleError, ValueError):
    """Raised when a note name is not in the alphabet or its enharmonic map."""

    def __init__(self, note: str) -> None:
        super().__init__(f"Unknown note: {note!r}")
        self.note = note


class TableLoadError(FretscaleError):
    """Raised when the equivalence table cannot be fetched."""


class TableFormatError(FretscaleError):
    """Raised when the equivalence table text does not have the expected shape."""
