# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Concurrent validation of all candidates for one window."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal

from bthint.candidates import CandidateBuilder
from bthint.checker import (
    Valid,
    ValidationOutcome,
    Validator,
    ValidatorError,
    Window,
)

logger = logging.getLogger(__name__)

WINDOW_DEADLINE_SECONDS = 5.0

RaceStatus = Literal["found", "exhausted", "deadline_expired"]


@dataclass(frozen=True)
class RaceOutcome:
    """Resolution of one window race.

    Attributes:
        status: ``found`` when a candidate validated, ``exhausted`` when every
            candidate was rejected, ``deadline_expired`` when the window ran
            out of time first.
        fragment: Undecorated window text for ``found``; otherwise ``None``.
    """

    status: RaceStatus
    fragment: str | None = None


class WindowRace:
    """Race the candidates of one window against a fresh deadline."""

    def __init__(
        self,
        builder: CandidateBuilder,
        validator: Validator,
        deadline_seconds: float = WINDOW_DEADLINE_SECONDS,
    ) -> None:
        """Initialize the race.

        Args:
            builder: Candidate builder for the checker family.
            validator: Validator used for every candidate.
            deadline_seconds: Time budget of a single window.

        Raises:
            ValueError: If ``deadline_seconds`` is not greater than zero.
        """
        if deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be > 0")
        self._builder = builder
        self._validator = validator
        self._deadline_seconds = deadline_seconds

    async def run(self, window: Window, lines: list[str]) -> RaceOutcome:
        """Validate all candidates of ``window`` concurrently.

        The first ``Valid`` outcome wins. Every validation still pending once
        the race resolves is cancelled and awaited, so its checker process is
        gone by the time this coroutine returns.

        Args:
            window: Window to race.
            lines: Full line sequence of the message.

        Returns:
            Race outcome for the window.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._deadline_seconds
        tasks = [
            asyncio.create_task(self._validator.validate(candidate))
            for candidate in self._builder.build(window, lines)
        ]
        pending: set[asyncio.Task[ValidationOutcome]] = set(tasks)
        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    return self._expired(window)
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                if not done:
                    return self._expired(window)
                for task in done:
                    outcome = task.result()
                    if isinstance(outcome, Valid):
                        return RaceOutcome(status="found", fragment=outcome.fragment)
                    if isinstance(outcome, ValidatorError):
                        logger.debug(
                            f"Checker malfunction counted as invalid (start={window.start} "
                            f"end={window.end} cause={outcome.cause})"
                        )
            return RaceOutcome(status="exhausted")
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    def _expired(self, window: Window) -> RaceOutcome:
        logger.info(
            f"Window deadline expired (start={window.start} end={window.end} "
            f"deadline_seconds={self._deadline_seconds})"
        )
        return RaceOutcome(status="deadline_expired")
