# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Candidate buffer construction for one window of message lines."""

import logging

from bthint.checker import VARIANTS, Candidate, CheckerSpec, Variant, Window

logger = logging.getLogger(__name__)


class CandidateBuilder:
    """Build decorated checker buffers for a window."""

    def __init__(self, checker: CheckerSpec) -> None:
        self._checker = checker

    def build(self, window: Window, lines: list[str]) -> list[Candidate]:
        """Build one candidate per variant for ``window``.

        Args:
            window: Half-open line range to decorate.
            lines: Full line sequence of the message.

        Returns:
            Exactly one candidate per variant. Order carries no meaning.

        Raises:
            ValueError: If the window extends past the line sequence.
        """
        if window.end > len(lines):
            raise ValueError(
                f"Window {window.start}..{window.end} exceeds {len(lines)} lines"
            )
        window_lines = lines[window.start : window.end]
        fragment = "\n".join(window_lines)
        return [
            Candidate(
                window=window,
                variant=variant,
                source=self._decorate(window_lines, variant),
                fragment=fragment,
            )
            for variant in VARIANTS
        ]

    def _decorate(self, window_lines: list[str], variant: Variant) -> str:
        parts: list[str] = []
        if not window_lines[0].startswith(self._checker.open_tag):
            parts.append(self._checker.open_tag + "\n")
        if variant == "wrapped_in_class":
            parts.append(self._checker.class_open + "\n")
        parts.extend(line + "\n" for line in window_lines)
        if variant == "wrapped_in_class":
            parts.append(self._checker.class_close + "\n")
        return "".join(parts)
