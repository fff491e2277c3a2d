"""
Railway-oriented result types for interactive choices.

A prompt either yields a value (``Success``) or a cancellation
(``Failure``). Call sites branch on both variants; an empty answer is never
treated as success.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar('T')
E = TypeVar('E')


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful choice."""
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failed or declined choice."""
    error: E


@dataclass(frozen=True)
class Cancelled:
    """The user escaped or interrupted a prompt."""
    prompt: str
    reason: str = "cancelled"


# Type alias for Railway Result
Result = Success[T] | Failure[E]

# Prompt results always fail with Cancelled
Choice = Result[T, Cancelled]
