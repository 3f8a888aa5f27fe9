# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Checker specifications shipped with bthint."""

from bthint.checkers.php import PHP_CHECKER, php_checker

__all__ = ["PHP_CHECKER", "php_checker"]
