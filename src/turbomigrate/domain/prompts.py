"""
Interactive choice capability.

The application layer only talks to a ``Prompter``; how options are drawn
and read is an interface concern. Every answer is a ``Choice`` result so a
cancelled prompt can't be mistaken for an answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, Sequence, TypeVar

from turbomigrate.domain.errors import UserCancelledError
from turbomigrate.domain.results import Cancelled, Choice, Failure, Success

T = TypeVar("T")


@dataclass(frozen=True)
class MenuOption(Generic[T]):
    """One selectable entry of a menu."""

    label: str
    value: T
    hint: str = ""


class Prompter(Protocol):
    """Protocol for asking the user to pick or confirm."""

    def select(
        self,
        message: str,
        options: Sequence[MenuOption[T]],
        default_index: int | None = None,
    ) -> Choice[int]:
        """Present ``options``; succeed with the chosen index."""
        ...

    def confirm(self, message: str, default: bool = False) -> Choice[bool]:
        """Ask a yes/no question."""
        ...


def unwrap_choice(result: Choice[T]) -> T:
    """
    Return the chosen value or abort the run.

    Raises:
        UserCancelledError: If the prompt was cancelled
    """
    if isinstance(result, Success):
        return result.value
    if isinstance(result, Failure):
        error = result.error
        detail = error.prompt if isinstance(error, Cancelled) else str(error)
        raise UserCancelledError(f"Migration cancelled. ({detail})")
    raise TypeError(f"Unexpected prompt result: {result!r}")
