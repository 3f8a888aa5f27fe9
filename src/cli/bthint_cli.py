# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line entry point for detection runs and the Slack bot."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style

from bthint.checkers import php_checker
from bthint.chat.slack import serve
from bthint.config import Settings
from bthint.detector import Detection, SnippetDetector

logger = logging.getLogger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="bthint")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser("detect")
    detect_parser.add_argument(
        "--path",
        required=False,
        help="File holding the message text. Reads stdin when omitted.",
    )
    detect_parser.add_argument(
        "--checker",
        required=False,
        help="PHP executable overriding BTHINT_CHECKER_EXECUTABLE.",
    )
    detect_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )

    subparsers.add_parser("serve")
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    stdin: TextIO | None = None,
) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        stdin: Message source for ``detect`` without ``--path``.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return EXIT_USAGE

    try:
        settings = Settings()
    except ValidationError as exc:
        logger.warning(f"Invalid settings (error={exc})")
        stderr.write(f"Invalid settings: {exc}\n")
        return EXIT_USAGE
    logging.getLogger().setLevel(settings.log_level_value)

    if args.command == "detect":
        return _run_detect(
            args=args,
            settings=settings,
            stdout=stdout,
            stderr=stderr,
            stdin=stdin if stdin is not None else sys.stdin,
        )
    if args.command == "serve":
        return _run_serve(settings=settings, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return EXIT_USAGE


def _run_detect(
    args: argparse.Namespace,
    settings: Settings,
    stdout: TextIO,
    stderr: TextIO,
    stdin: TextIO,
) -> int:
    """Run detect command.

    Args:
        args: Parsed CLI arguments.
        settings: Loaded settings.
        stdout: Standard output stream.
        stderr: Standard error stream.
        stdin: Message source when ``--path`` is omitted.

    Returns:
        Exit code.
    """
    if args.path:
        path = Path(args.path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed to read message file (path={path} error={exc})")
            stderr.write(f"Failed to read message file: {path}\n")
            return EXIT_USAGE
    else:
        text = stdin.read()

    detector = SnippetDetector(
        checker=php_checker(args.checker or settings.checker_executable),
        deadline_policy=settings.deadline_policy,
    )
    detection = asyncio.run(detector.detect(text))
    line_count = len(text.split("\n"))
    logger.info(
        f"Detection completed (lines={line_count} found={detection is not None})"
    )
    if args.format == "json":
        _write_json(detection=detection, stdout=stdout)
    else:
        _write_text(detection=detection, stdout=stdout)
    return EXIT_FOUND if detection is not None else EXIT_NOT_FOUND


def _run_serve(settings: Settings, stderr: TextIO) -> int:
    """Run serve command until the bot is stopped.

    Args:
        settings: Loaded settings.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    if not settings.slack_bot_token or not settings.slack_app_token:
        logger.warning("Slack tokens are not configured")
        stderr.write("BTHINT_SLACK_BOT_TOKEN and BTHINT_SLACK_APP_TOKEN are required\n")
        return EXIT_USAGE
    asyncio.run(serve(settings))
    return 0


def _write_json(detection: Detection | None, stdout: TextIO) -> None:
    """Write the detection as JSON.

    Args:
        detection: Detection result, or ``None``.
        stdout: Standard output stream.
    """
    payload = {"detection": asdict(detection) if detection is not None else None}
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_text(detection: Detection | None, stdout: TextIO) -> None:
    """Write the detection as a ruled text block.

    Args:
        detection: Detection result, or ``None``.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    if detection is None:
        console.print("No unfenced code found.", markup=False, highlight=False)
        return
    console.rule(detection.language, style=Style(color="cyan"), characters="-")
    console.print(detection.fragment, markup=False, highlight=False, soft_wrap=True)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
