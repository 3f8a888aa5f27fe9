# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Sliding-window search for unfenced code fragments in chat text."""

import logging
from dataclasses import dataclass
from typing import Iterator, Literal

from bthint.candidates import CandidateBuilder
from bthint.checker import CheckerSpec, Validator, Window
from bthint.race import WINDOW_DEADLINE_SECONDS, WindowRace
from bthint.validator import SyntaxValidator

logger = logging.getLogger(__name__)

MIN_WINDOW_LINES = 5
TRIGGER_CHARACTERS = frozenset(";${")

DeadlinePolicy = Literal["abort_search", "skip_window"]


@dataclass(frozen=True)
class Detection:
    """Represent a detected code fragment.

    Attributes:
        language: Language tag of the checker that accepted the fragment.
        fragment: Original message lines of the fragment joined by newlines.
    """

    language: str
    fragment: str


class SnippetDetector:
    """Find the earliest, longest syntactically valid fragment in a message.

    Windows are tried by ascending start line and, for each start, by
    descending end line, so the first accepted window is the longest fragment
    at the earliest possible start. Only one window race runs at a time.
    """

    def __init__(
        self,
        checker: CheckerSpec,
        validator: Validator | None = None,
        min_window_lines: int = MIN_WINDOW_LINES,
        deadline_seconds: float = WINDOW_DEADLINE_SECONDS,
        deadline_policy: DeadlinePolicy = "abort_search",
    ) -> None:
        """Initialize the detector.

        Args:
            checker: Checker family used to validate candidates.
            validator: Validator override; defaults to a ``SyntaxValidator``.
            min_window_lines: Smallest fragment size, in lines.
            deadline_seconds: Time budget of each window race.
            deadline_policy: What an expired window deadline does to the
                search. ``abort_search`` ends the whole search without a
                match; ``skip_window`` moves on to the next window.

        Raises:
            ValueError: If ``min_window_lines`` is not greater than zero.
        """
        if min_window_lines <= 0:
            raise ValueError("min_window_lines must be > 0")
        self._checker = checker
        self._min_window_lines = min_window_lines
        self._deadline_policy = deadline_policy
        self._race = WindowRace(
            builder=CandidateBuilder(checker),
            validator=validator or SyntaxValidator(checker),
            deadline_seconds=deadline_seconds,
        )

    @property
    def language(self) -> str:
        return self._checker.language

    async def detect(self, message_text: str) -> Detection | None:
        """Search ``message_text`` for a valid code fragment.

        Args:
            message_text: Raw chat message.

        Returns:
            The detection, or ``None`` when no window validates or the search
            was aborted.
        """
        if not TRIGGER_CHARACTERS.intersection(message_text):
            return None

        lines = message_text.split("\n")
        if len(lines) <= self._min_window_lines:
            return None

        for window in self._windows(len(lines)):
            outcome = await self._race.run(window, lines)
            if outcome.status == "found" and outcome.fragment is not None:
                logger.info(
                    f"Detected code fragment (language={self.language} "
                    f"start={window.start} end={window.end})"
                )
                return Detection(language=self.language, fragment=outcome.fragment)
            if outcome.status == "deadline_expired" and not self._continue_after_deadline(
                window
            ):
                return None
        return None

    def _windows(self, line_count: int) -> Iterator[Window]:
        for start in range(0, line_count - self._min_window_lines):
            for end in range(line_count, start + self._min_window_lines - 1, -1):
                yield Window(start=start, end=end)

    def _continue_after_deadline(self, window: Window) -> bool:
        """Decide whether the search goes on after a window timed out."""
        if self._deadline_policy == "skip_window":
            logger.debug(
                f"Skipping timed out window (start={window.start} end={window.end})"
            )
            return True
        logger.info(
            f"Aborting search after window deadline (start={window.start} end={window.end})"
        )
        return False


async def detect_language(
    message_text: str, detectors: list[SnippetDetector]
) -> Detection | None:
    """Run detectors in order and return the first detection.

    Args:
        message_text: Raw chat message.
        detectors: Detectors to try, one per checker family.

    Returns:
        First detection found, or ``None``.
    """
    for detector in detectors:
        detection = await detector.detect(message_text)
        if detection is not None:
            return detection
    return None
