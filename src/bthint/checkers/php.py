# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""PHP checker specification backed by ``php -l``."""

from dataclasses import replace

from bthint.checker import CheckerSpec

PHP_CHECKER = CheckerSpec(
    language="php",
    executable="php",
    lint_flag="-l",
    open_tag="<?php",
    class_open="class Foo {",
    class_close="}",
)


def php_checker(executable: str | None = None) -> CheckerSpec:
    """Return the PHP checker spec, optionally with another executable.

    Args:
        executable: Path or name of the PHP binary. ``None`` keeps ``php``.

    Returns:
        Checker spec for PHP.
    """
    if not executable:
        return PHP_CHECKER
    return replace(PHP_CHECKER, executable=executable)
