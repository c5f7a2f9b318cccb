"""Parsing of interactive numbered choices."""

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar, Union

from nobold.models.errors import InvalidSelectionError

T = TypeVar("T")

ABORT_WORDS = frozenset({"q", "quit", "n", "no"})


@dataclass(frozen=True)
class Aborted:
    """The user declined to choose."""


@dataclass(frozen=True)
class Selected(Generic[T]):
    """A valid choice."""

    value: T
    index: int  # 1-based


@dataclass(frozen=True)
class Invalid:
    """A choice that was not a valid index."""

    error: InvalidSelectionError


SelectionOutcome = Union[Aborted, Selected[T], Invalid]


def parse_index(raw: str, count: int, default: int) -> int:
    """
    Turn user input into a 1-based index.

    Empty input selects default.

    Raises:
        InvalidSelectionError: Not a number, or outside 1..count
    """
    text = raw.strip()
    if not text:
        return default

    try:
        index = int(text)
    except ValueError:
        raise InvalidSelectionError(text, count) from None

    if not 1 <= index <= count:
        raise InvalidSelectionError(text, count)
    return index


def choose(raw: str, options: Sequence[T], default: int = 1) -> SelectionOutcome:
    """Resolve user input against a list of options."""
    if raw.strip().lower() in ABORT_WORDS:
        return Aborted()

    try:
        index = parse_index(raw, len(options), default)
    except InvalidSelectionError as e:
        return Invalid(e)

    return Selected(options[index - 1], index)
