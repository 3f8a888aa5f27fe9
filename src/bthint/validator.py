# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Syntax validation through an external checker process."""

import asyncio
import logging

from bthint.checker import (
    Candidate,
    CheckerSpec,
    Invalid,
    Valid,
    ValidationOutcome,
    ValidatorError,
)

logger = logging.getLogger(__name__)


class SyntaxValidator:
    """Run one lint-only checker process per candidate.

    The checker receives the candidate buffer on standard input; its output
    streams are discarded and only the exit status is consulted. A process
    that is still running when the validation ends, including through task
    cancellation, is killed and reaped before control returns to the caller.
    """

    def __init__(self, checker: CheckerSpec) -> None:
        """Initialize the validator.

        Args:
            checker: Checker family to invoke.
        """
        self._checker = checker

    async def validate(self, candidate: Candidate) -> ValidationOutcome:
        """Validate one candidate buffer.

        Args:
            candidate: Decorated buffer and its undecorated fragment.

        Returns:
            ``Valid`` on exit status 0, ``Invalid`` on any other status and
            ``ValidatorError`` when the checker cannot be run to completion.
        """
        window = candidate.window
        logger.debug(
            f"Piping candidate to checker (start={window.start} end={window.end} "
            f"variant={candidate.variant} executable={self._checker.executable})"
        )
        try:
            process = await asyncio.create_subprocess_exec(
                self._checker.executable,
                self._checker.lint_flag,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning(
                f"Failed to spawn checker (executable={self._checker.executable} error={exc})"
            )
            return ValidatorError(cause=f"spawn failed: {exc}")

        try:
            return await self._run(process, candidate)
        finally:
            if process.returncode is None:
                await _terminate(process)

    async def _run(
        self, process: asyncio.subprocess.Process, candidate: Candidate
    ) -> ValidationOutcome:
        if process.stdin is None:
            return ValidatorError(cause="checker stdin is not available")

        logger.debug(f"Writing checker stdin (pid={process.pid})")
        try:
            process.stdin.write(candidate.source.encode("utf-8"))
            await process.stdin.drain()
            process.stdin.close()
            await process.stdin.wait_closed()
        except (OSError, UnicodeEncodeError) as exc:
            logger.warning(
                f"Failed to write checker stdin (pid={process.pid} error={exc})"
            )
            return ValidatorError(cause=f"stdin write failed: {exc}")

        logger.debug(f"Waiting for checker completion (pid={process.pid})")
        try:
            returncode = await process.wait()
        except OSError as exc:
            logger.warning(f"Failed to wait for checker (pid={process.pid} error={exc})")
            return ValidatorError(cause=f"wait failed: {exc}")

        logger.debug(
            f"Checker returned (pid={process.pid} returncode={returncode} "
            f"variant={candidate.variant})"
        )
        if returncode == 0:
            return Valid(fragment=candidate.fragment)
        return Invalid()


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a checker process and reap it."""
    logger.debug(f"Terminating abandoned checker (pid={process.pid})")
    try:
        process.kill()
    except ProcessLookupError:
        # exited between the returncode check and the kill
        pass
    await process.wait()
