# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Checker contracts and DTOs for snippet detection."""

from dataclasses import dataclass
from typing import Literal, Protocol


Variant = Literal["plain", "wrapped_in_class"]

VARIANTS: tuple[Variant, ...] = ("plain", "wrapped_in_class")


@dataclass(frozen=True)
class CheckerSpec:
    """Describe one external syntax checker family.

    Attributes:
        language: Language tag reported with a detection (e.g. ``php``).
        executable: Checker executable name or path.
        lint_flag: Single argument that puts the checker in lint-only mode.
        open_tag: Marker a source buffer must start with.
        class_open: Synthetic line opening a class body.
        class_close: Synthetic line closing a class body.
    """

    language: str
    executable: str
    lint_flag: str
    open_tag: str
    class_open: str
    class_close: str


@dataclass(frozen=True)
class Window:
    """Half-open ``[start, end)`` range over a message's lines."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end <= self.start:
            raise ValueError(f"Invalid window bounds: {self.start}..{self.end}")

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Candidate:
    """One decorated source buffer for a window.

    Attributes:
        window: Window the buffer was built from.
        variant: Decoration applied to the window lines.
        source: Buffer written to the checker's standard input.
        fragment: Undecorated window lines joined by newlines.
    """

    window: Window
    variant: Variant
    source: str
    fragment: str


@dataclass(frozen=True)
class Valid:
    """Checker accepted the candidate; carries the undecorated fragment."""

    fragment: str


@dataclass(frozen=True)
class Invalid:
    """Checker rejected the candidate."""


@dataclass(frozen=True)
class ValidatorError:
    """Checker could not be run to completion."""

    cause: str


ValidationOutcome = Valid | Invalid | ValidatorError


class Validator(Protocol):
    """Validate one candidate against an external checker."""

    async def validate(self, candidate: Candidate) -> ValidationOutcome:
        """Return the checker verdict for ``candidate``.

        Implementations never raise for checker failures; they return
        ``ValidatorError`` instead.
        """
